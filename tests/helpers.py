"""
Shared test sequences and stub aligners.
"""
import threading

from ovlrefine.alignment.aligner import PairwiseAligner
from ovlrefine.alignment.cigar import CigarOp
from ovlrefine.core.models import AlignmentResult
from ovlrefine.errors import AlignmentFailureError

# 80 bp without internal repeats long enough to compete with the true alignment
GENOME = (
    "ATGCGTACGT"
    "TAGCCTAGGA"
    "TCCGATCGTA"
    "GCTAGCTTAC"
    "GGATCAGTCC"
    "ATGACTGATC"
    "GGCTAAGTCG"
    "ATCCGTAGCA"
)


class TrimmingAligner(PairwiseAligner):
    """
    Stub aligner that trims fixed amounts and reports a plain match.

    Records every (query, target) pair and the thread that aligned it.
    """

    def __init__(self, tstart=0, tend=0, qstart=0, qend=0, cigar=None, fail_on=None):
        self.trims = (tstart, tend, qstart, qend)
        self.cigar = cigar
        self.fail_on = fail_on or set()
        self.calls = []
        self.threads = set()

    def align(self, query: bytes, target: bytes) -> AlignmentResult:
        self.calls.append((query, target))
        self.threads.add(threading.get_ident())
        if query in self.fail_on:
            raise AlignmentFailureError("stub failure")

        tstart, tend, qstart, qend = self.trims
        if self.cigar is not None:
            cigar = list(self.cigar)
        else:
            cigar = [CigarOp.match(len(query) - qstart - qend)]
        return AlignmentResult(cigar=cigar, tstart=tstart, tend=tend, qstart=qstart, qend=qend)


class CountingFactory:
    """Aligner factory that remembers every aligner it built."""

    def __init__(self, **aligner_kwargs):
        self.aligner_kwargs = aligner_kwargs
        self.built = []
        self._lock = threading.Lock()

    def __call__(self) -> TrimmingAligner:
        aligner = TrimmingAligner(**self.aligner_kwargs)
        with self._lock:
            self.built.append(aligner)
        return aligner


