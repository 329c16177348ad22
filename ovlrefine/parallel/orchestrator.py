"""
Parallel alignment of overlaps.

Every overlap is aligned independently: the reads are only read, each
overlap is written by exactly one batch task, and each worker thread keeps
its own aligner.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from tqdm import tqdm

from ovlrefine.alignment.aligner import PairwiseAligner, create_aligner
from ovlrefine.alignment.normalize import calculate_accuracy, fix_cigar
from ovlrefine.alignment.sequence import reverse_complement
from ovlrefine.core.io import ReadStore
from ovlrefine.core.models import Overlap, Strand
from ovlrefine.errors import (
    AlignmentFailureError,
    DegenerateAccuracyError,
    InvalidBaseError,
    InvalidCigarSymbolError,
    OverlapRefinementError,
)
from ovlrefine.parallel.task_manager import TaskChunker, ThreadWorkerPool, WorkerResources

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 16

# Errors that only invalidate the overlap being processed
PER_OVERLAP_ERRORS = (
    InvalidBaseError,
    InvalidCigarSymbolError,
    AlignmentFailureError,
    DegenerateAccuracyError,
)

# Number of individual failures logged before only the summary is reported
MAX_LOGGED_FAILURES = 10


@dataclass
class RefinementFailure:
    """An overlap that could not be refined and the reason why."""
    index: int
    error: OverlapRefinementError


@dataclass
class BatchOutcome:
    processed: int
    skipped: int = 0
    failures: List[RefinementFailure] = field(default_factory=list)


@dataclass
class RefinementReport:
    """Summary of one align_overlaps call."""
    total: int = 0
    skipped: int = 0
    failures: List[RefinementFailure] = field(default_factory=list)

    @property
    def refined(self) -> int:
        return self.total - self.skipped - len(self.failures)

    @property
    def failed_indices(self) -> List[int]:
        return sorted(failure.index for failure in self.failures)


def refine_overlap(overlap: Overlap, reads: ReadStore, aligner: PairwiseAligner,
                   left_align: bool = False) -> None:
    """
    Align one overlap and write the refined coordinates, CIGAR and accuracy.

    The overlap is only modified once every step has succeeded, so on error
    it is left exactly as it was.

    Args:
        overlap: Overlap to refine in place
        reads: Read store holding both reads
        aligner: Aligner owned by the calling worker
        left_align: Also left-align indels and move the alignment start by
            any indel pushed to the front

    Raises:
        UnknownReadError, CoordinateError: Corrupted input, fatal for the run
        InvalidBaseError, AlignmentFailureError, DegenerateAccuracyError,
        InvalidCigarSymbolError: The overlap cannot be refined
    """
    target = reads.slice(overlap.tid, overlap.tstart, overlap.tend)
    query = reads.slice(overlap.qid, overlap.qstart, overlap.qend)
    if overlap.strand is Strand.REVERSE:
        query = reverse_complement(query)

    result = aligner.align(query, target)

    tstart = overlap.tstart + result.tstart
    tend = overlap.tend - result.tend
    # A reverse complemented query runs backwards, so its start trim is the end of the read range
    if overlap.strand is Strand.FORWARD:
        qstart = overlap.qstart + result.qstart
        qend = overlap.qend - result.qend
    else:
        qstart = overlap.qstart + result.qend
        qend = overlap.qend - result.qstart

    if tstart > tend or qstart > qend:
        raise AlignmentFailureError(
            f"Trims exceed the overlap (target {tstart}..{tend}, query {qstart}..{qend})")

    cigar = list(result.cigar)
    if left_align:
        aligned_target = target[result.tstart:len(target) - result.tend]
        aligned_query = query[result.qstart:len(query) - result.qend]
        target_shift, query_shift = fix_cigar(cigar, aligned_target, aligned_query)
        tstart += target_shift
        if overlap.strand is Strand.FORWARD:
            qstart += query_shift
        else:
            qend -= query_shift

    accuracy = calculate_accuracy(cigar)

    overlap.tstart, overlap.tend = tstart, tend
    overlap.qstart, overlap.qend = qstart, qend
    overlap.cigar = cigar
    overlap.accuracy = accuracy


def _refine_batch(indices: Sequence[int], overlaps: Sequence[Overlap], reads: ReadStore,
                  aligners: WorkerResources, left_align: bool) -> BatchOutcome:
    outcome = BatchOutcome(processed=len(indices))
    for index in indices:
        overlap = overlaps[index]
        if overlap.is_refined:
            outcome.skipped += 1
            continue
        try:
            refine_overlap(overlap, reads, aligners.get(), left_align=left_align)
        except PER_OVERLAP_ERRORS as e:
            outcome.failures.append(RefinementFailure(index, e))
    return outcome


def align_overlaps(overlaps: Sequence[Overlap],
                   reads: ReadStore,
                   aligner_factory: Optional[Callable[[], PairwiseAligner]] = None,
                   num_workers: Optional[int] = None,
                   batch_size: int = DEFAULT_BATCH_SIZE,
                   left_align: bool = False,
                   progress: bool = True) -> RefinementReport:
    """
    Refine all overlaps in place, in parallel.

    Overlaps are split into disjoint index batches; each batch runs on one
    worker thread with that thread's aligner. An overlap that fails keeps
    ``cigar`` and ``accuracy`` set to None and is listed in the report.
    Overlaps that were already refined are left untouched.

    Args:
        overlaps: Overlaps to refine
        reads: Read store the overlap ids index into
        aligner_factory: Builds one aligner per worker. Defaults to the Biopython aligner.
        num_workers: Number of worker threads. Defaults to CPU count.
        batch_size: Number of overlaps per task
        left_align: Left-align indels of every stored CIGAR
        progress: Show a progress bar

    Returns:
        RefinementReport with per-overlap failures

    Raises:
        UnknownReadError, CoordinateError: If an overlap does not fit the read store
    """
    report = RefinementReport(total=len(overlaps))
    if not overlaps:
        logger.warning("No overlaps provided for alignment")
        return report

    aligners = WorkerResources(aligner_factory or create_aligner)
    batches = TaskChunker.chunk_by_size(list(range(len(overlaps))), batch_size)

    def run(indices: Sequence[int]) -> BatchOutcome:
        return _refine_batch(indices, overlaps, reads, aligners, left_align)

    start_time = time.monotonic()
    with ThreadWorkerPool(num_workers) as pool:
        logger.info(f"Aligning {len(overlaps)} overlaps in {len(batches)} batches "
                    f"using {pool.num_workers} workers")
        with tqdm(total=len(overlaps), desc="Aligning overlaps", unit=" overlaps",
                  disable=not progress) as pbar:
            outcomes = pool.map(run, batches, on_done=lambda outcome: pbar.update(outcome.processed))

    for outcome in outcomes:
        report.skipped += outcome.skipped
        report.failures.extend(outcome.failures)
    report.failures.sort(key=lambda failure: failure.index)

    for failure in report.failures[:MAX_LOGGED_FAILURES]:
        logger.warning(f"Overlap {failure.index} not refined: {failure.error}")
    if len(report.failures) > MAX_LOGGED_FAILURES:
        logger.warning(f"... and {len(report.failures) - MAX_LOGGED_FAILURES} more failed overlaps")

    logger.info(f"Refined {report.refined}/{report.total} overlaps "
                f"({len(report.failures)} failed, {report.skipped} already refined, "
                f"{aligners.created} aligners) in {time.monotonic() - start_time:.2f} seconds")
    return report


def refined(overlaps: Iterable[Overlap]) -> Iterator[Overlap]:
    """Yield only overlaps that carry a CIGAR."""
    return (overlap for overlap in overlaps if overlap.is_refined)
