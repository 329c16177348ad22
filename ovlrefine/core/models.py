from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ovlrefine.alignment.cigar import CigarOp, cigar_to_string


class Strand(Enum):
    """Relative orientation of the query against the target."""
    FORWARD = "+"
    REVERSE = "-"

    @classmethod
    def from_symbol(cls, symbol: str) -> "Strand":
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Invalid strand symbol: {symbol!r}") from None


@dataclass(frozen=True)
class ReadRecord:
    """A named, immutable read sequence."""
    name: str
    seq: bytes

    def __len__(self) -> int:
        return len(self.seq)


@dataclass
class Overlap:
    """
    Candidate pairwise alignment between two reads.

    Coordinates are half-open, 0-based ranges on the original orientation of
    each read. ``cigar`` and ``accuracy`` stay None until the overlap has been
    refined; a refined overlap is never re-aligned.
    """
    qid: int
    qstart: int
    qend: int
    strand: Strand
    tid: int
    tstart: int
    tend: int
    cigar: Optional[List[CigarOp]] = None
    accuracy: Optional[float] = None

    @property
    def is_refined(self) -> bool:
        return self.cigar is not None

    @property
    def cigar_string(self) -> Optional[str]:
        if self.cigar is None:
            return None
        return cigar_to_string(self.cigar)


@dataclass
class AlignmentResult:
    """
    Raw pairwise aligner output.

    The trims count how many leading/trailing bases of the target and query
    sequences handed to the aligner fall outside the aligned interior.
    """
    cigar: List[CigarOp] = field(default_factory=list)
    tstart: int = 0
    tend: int = 0
    qstart: int = 0
    qend: int = 0
