"""Document data models."""

from __future__ import annotations

from array import array
from dataclasses import dataclass, field
from typing import NewType


DocumentId = NewType("DocumentId", int)
ValueNumber = int
Value = bytes
Position = int


@dataclass(frozen=True, slots=True)
class Term:
    """An indexed term and the positions at which it occurs.

    ``positions`` is empty when the document was indexed without positional
    information for this term.
    """

    term: bytes
    positions: array = field(default_factory=lambda: array("I"))

    @property
    def frequency(self) -> int:
        """Number of recorded positions."""
        return len(self.positions)
