"""Unit tests for the NUL-escaping codec."""

from hypothesis import given
from hypothesis import strategies as st
from prometheus_client import REGISTRY
import pytest

from xapian_bridge.codec import SENTINEL, decode, encode
from xapian_bridge.errors import DecodeError, XapianBridgeError


# Bytes drawn mostly from the escape alphabet so sentinels and NULs collide often
escape_heavy = st.lists(st.sampled_from([b"\x00", b"z", b"0", b"a", b"\xff"]), max_size=64).map(b"".join)
payloads = st.one_of(st.binary(max_size=512), escape_heavy)


class TestEncode:
    def test_plain_bytes_pass_through(self):
        assert encode(b"hello world") == b"hello world"

    def test_empty_input(self):
        assert encode(b"") == b""
        assert decode(b"") == b""

    def test_nul_becomes_sentinel_zero(self):
        assert encode(b"hello\x00world") == b"helloz0world"

    def test_sentinel_is_doubled(self):
        assert encode(b"zebra") == b"zzebra"
        assert encode(b"z") == b"zz"

    def test_mixed_escapes(self):
        assert encode(b"\x00z\x00zz") == b"z0zzz0zzzz"

    def test_output_never_contains_nul(self):
        data = bytes(range(256)) * 2
        assert b"\x00" not in encode(data)

    def test_grows_by_one_byte_per_escape(self):
        data = b"a\x00bz\x00c"
        escapes = data.count(b"\x00") + data.count(b"z")
        assert len(encode(data)) == len(data) + escapes

    def test_sentinel_constant(self):
        assert SENTINEL == ord("z")


class TestDecode:
    def test_reverses_escapes(self):
        assert decode(b"helloz0world") == b"hello\x00world"
        assert decode(b"zzebra") == b"zebra"

    def test_lone_trailing_sentinel_fails(self):
        with pytest.raises(DecodeError, match="truncated") as excinfo:
            decode(b"abcz")
        assert excinfo.value.offset == 3

    def test_sentinel_alone_fails(self):
        with pytest.raises(DecodeError):
            decode(b"z")

    @pytest.mark.parametrize("follower", [b"1", b"a", b"Z", b"\x00", b"\xff"])
    def test_unknown_follower_fails(self, follower):
        with pytest.raises(DecodeError, match="invalid escape sequence"):
            decode(b"ab" + b"z" + follower + b"cd")

    def test_raw_nul_is_rejected(self):
        with pytest.raises(DecodeError, match="unescaped NUL") as excinfo:
            decode(b"ab\x00cd")
        assert excinfo.value.offset == 2

    def test_decode_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode(b"zq")
        assert issubclass(DecodeError, XapianBridgeError)

    def test_failure_is_counted(self):
        before = REGISTRY.get_sample_value("xapian_codec_decode_failures_total") or 0.0
        with pytest.raises(DecodeError):
            decode(b"zx")
        after = REGISTRY.get_sample_value("xapian_codec_decode_failures_total")
        assert after == before + 1


class TestRoundTrip:
    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"\x00",
            b"z",
            b"z0",
            b"zz0",
            b"\x00\x00\x00",
            b"pizza\x00fizz",
            bytes(range(256)),
            "héllo wörld".encode(),
        ],
    )
    def test_decode_inverts_encode(self, data):
        assert decode(encode(data)) == data

    @pytest.mark.parametrize("encoded", [b"", b"abc", b"z0", b"zz", b"az0bzzc", b"z0z0zz"])
    def test_encode_inverts_decode_on_valid_input(self, encoded):
        assert encode(decode(encoded)) == encoded


class TestCodecProperties:
    @given(data=payloads)
    def test_decode_inverts_encode(self, data):
        assert decode(encode(data)) == data

    @given(data=payloads)
    def test_encode_inverts_decode_on_encoder_output(self, data):
        encoded = encode(data)
        assert encode(decode(encoded)) == encoded

    @given(data=payloads)
    def test_encoded_form_is_a_c_string(self, data):
        assert b"\x00" not in encode(data)

    @given(data=payloads)
    def test_arbitrary_input_decodes_or_raises(self, data):
        try:
            decoded = decode(data)
        except DecodeError as exc:
            assert exc.offset is not None
            assert 0 <= exc.offset < len(data)
            return
        assert encode(decoded) == data
