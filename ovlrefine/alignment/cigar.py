"""
Run-length CIGAR operations.

A CIGAR is an ordered list of CigarOp values describing a left-to-right walk
over target and query at the same time. Match, Mismatch and Deletion consume
target bases; Match, Mismatch and Insertion consume query bases.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Sequence

from ovlrefine.errors import InvalidCigarSymbolError


class CigarKind(Enum):
    """Operation kinds, valued by their extended-CIGAR symbol."""
    MATCH = "="
    MISMATCH = "X"
    INSERTION = "I"
    DELETION = "D"

    @property
    def consumes_target(self) -> bool:
        return self is not CigarKind.INSERTION

    @property
    def consumes_query(self) -> bool:
        return self is not CigarKind.DELETION


# Symbols emitted by pairwise aligners in their raw traces
ALIGNER_SYMBOLS: Dict[str, CigarKind] = {
    "M": CigarKind.MATCH,
    "X": CigarKind.MISMATCH,
    "I": CigarKind.INSERTION,
    "D": CigarKind.DELETION,
}

_CIGAR_PATTERN = re.compile(r"(\d+)(\D)")


@dataclass(frozen=True)
class CigarOp:
    """A single run of one operation kind."""
    kind: CigarKind
    length: int

    @classmethod
    def match(cls, length: int) -> "CigarOp":
        return cls(CigarKind.MATCH, length)

    @classmethod
    def mismatch(cls, length: int) -> "CigarOp":
        return cls(CigarKind.MISMATCH, length)

    @classmethod
    def insertion(cls, length: int) -> "CigarOp":
        return cls(CigarKind.INSERTION, length)

    @classmethod
    def deletion(cls, length: int) -> "CigarOp":
        return cls(CigarKind.DELETION, length)

    @classmethod
    def from_symbol(cls, length: int, symbol: str) -> "CigarOp":
        """
        Build an op from a raw aligner trace entry.

        Args:
            length: Run length in bases
            symbol: One of 'M', 'X', 'I', 'D'

        Returns:
            The corresponding CigarOp

        Raises:
            InvalidCigarSymbolError: If the symbol is not recognized
        """
        try:
            kind = ALIGNER_SYMBOLS[symbol]
        except KeyError:
            raise InvalidCigarSymbolError(symbol) from None
        return cls(kind, length)

    @property
    def is_indel(self) -> bool:
        return self.kind in (CigarKind.INSERTION, CigarKind.DELETION)

    def reverse(self) -> "CigarOp":
        """Swap insertion and deletion; matches and mismatches are unchanged."""
        if self.kind is CigarKind.INSERTION:
            return CigarOp(CigarKind.DELETION, self.length)
        if self.kind is CigarKind.DELETION:
            return CigarOp(CigarKind.INSERTION, self.length)
        return self

    def with_length(self, length: int) -> "CigarOp":
        return CigarOp(self.kind, length)

    def __str__(self) -> str:
        return f"{self.length}{self.kind.value}"


def cigar_to_string(cigar: Iterable[CigarOp]) -> str:
    """Render a CIGAR in extended-CIGAR notation, e.g. '10=1X2I5='."""
    return "".join(str(op) for op in cigar)


def parse_cigar(cigar_string: str) -> List[CigarOp]:
    """
    Parse an extended CIGAR string into CigarOp values.

    Both '=' and 'M' are read as Match.

    Raises:
        InvalidCigarSymbolError: On any other operation symbol or trailing garbage
    """
    operations = []
    position = 0
    for found in _CIGAR_PATTERN.finditer(cigar_string):
        if found.start() != position:
            raise InvalidCigarSymbolError(cigar_string[position:found.start()])
        length, symbol = int(found.group(1)), found.group(2)
        if symbol == "=":
            symbol = "M"
        operations.append(CigarOp.from_symbol(length, symbol))
        position = found.end()

    if position != len(cigar_string):
        raise InvalidCigarSymbolError(cigar_string[position:])
    return operations


def target_span(cigar: Sequence[CigarOp]) -> int:
    """Number of target bases consumed by the CIGAR."""
    return sum(op.length for op in cigar if op.kind.consumes_target)


def query_span(cigar: Sequence[CigarOp]) -> int:
    """Number of query bases consumed by the CIGAR."""
    return sum(op.length for op in cigar if op.kind.consumes_query)
