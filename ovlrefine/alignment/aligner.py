"""
Pairwise aligner capability and its Biopython implementation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from Bio.Align import PairwiseAligner as BioPairwiseAligner

from ovlrefine.alignment.cigar import CigarOp
from ovlrefine.core.models import AlignmentResult
from ovlrefine.errors import AlignmentFailureError

logger = logging.getLogger(__name__)

DEFAULT_SCORING: Dict[str, float] = {
    "match_score": 2.0,
    "mismatch_score": -4.0,
    "open_gap_score": -4.0,
    "extend_gap_score": -2.0,
}


class PairwiseAligner(ABC):
    """
    Aligns a query against a target and reports the aligned interior.

    Instances are not required to be thread-safe; the orchestrator keeps one
    instance per worker thread.
    """

    @abstractmethod
    def align(self, query: bytes, target: bytes) -> AlignmentResult:
        """
        Align query to target.

        Args:
            query: Query bases, already in the orientation to align
            target: Target bases

        Returns:
            AlignmentResult with the CIGAR and the four trim counts

        Raises:
            AlignmentFailureError: If no alignment could be produced
        """


def _runs_from_path(coordinates, target: str, query: str) -> Iterator[Tuple[int, str]]:
    """Yield raw (length, symbol) runs along a Biopython alignment path."""
    path = list(zip(coordinates[0], coordinates[1]))
    for (t0, q0), (t1, q1) in zip(path, path[1:]):
        t0, q0, t1, q1 = int(t0), int(q0), int(t1), int(q1)
        dt, dq = t1 - t0, q1 - q0
        if dt and dq:
            for offset in range(dt):
                yield 1, "M" if target[t0 + offset] == query[q0 + offset] else "X"
        elif dt:
            yield dt, "D"
        elif dq:
            yield dq, "I"


def _compact_runs(runs: Iterator[Tuple[int, str]]) -> List[Tuple[int, str]]:
    compacted: List[Tuple[int, str]] = []
    for length, symbol in runs:
        if compacted and compacted[-1][1] == symbol:
            compacted[-1] = (compacted[-1][0] + length, symbol)
        else:
            compacted.append((length, symbol))
    return compacted


class BiopythonAligner(PairwiseAligner):
    """
    Local pairwise alignment with Bio.Align.PairwiseAligner.

    The target is the first row of the alignment and the query the second,
    so gaps in the target row are insertions and gaps in the query row are
    deletions.
    """

    def __init__(self, **scoring: Any):
        """
        Initialize the aligner.

        Args:
            **scoring: Overrides for match_score, mismatch_score,
                open_gap_score and extend_gap_score
        """
        unknown = set(scoring) - set(DEFAULT_SCORING)
        if unknown:
            raise ValueError(f"Unknown aligner parameters: {', '.join(sorted(unknown))}")

        self.scoring = {**DEFAULT_SCORING, **scoring}
        self._aligner = BioPairwiseAligner()
        self._aligner.mode = "local"
        for name, value in self.scoring.items():
            setattr(self._aligner, name, value)
        logger.debug(f"Created Biopython aligner with scoring {self.scoring}")

    def align(self, query: bytes, target: bytes) -> AlignmentResult:
        if not query or not target:
            raise AlignmentFailureError(
                f"Cannot align empty sequence (query={len(query)} bp, target={len(target)} bp)")

        target_str = bytes(target).decode("ascii")
        query_str = bytes(query).decode("ascii")

        alignments = self._aligner.align(target_str, query_str)
        if alignments.score <= 0:
            raise AlignmentFailureError(
                f"No positive-scoring alignment (score={alignments.score})")
        alignment = next(iter(alignments), None)
        if alignment is None:
            raise AlignmentFailureError("Aligner returned no alignment")

        coordinates = alignment.coordinates
        runs = _compact_runs(_runs_from_path(coordinates, target_str, query_str))
        cigar = [CigarOp.from_symbol(length, symbol) for length, symbol in runs]
        if not cigar:
            raise AlignmentFailureError("Aligner returned an empty trace")

        return AlignmentResult(
            cigar=cigar,
            tstart=int(coordinates[0][0]),
            tend=len(target_str) - int(coordinates[0][-1]),
            qstart=int(coordinates[1][0]),
            qend=len(query_str) - int(coordinates[1][-1]),
        )


def create_aligner(scoring: Optional[Dict[str, Any]] = None) -> PairwiseAligner:
    """Factory for the default aligner implementation."""
    return BiopythonAligner(**(scoring or {}))
