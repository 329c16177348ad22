"""
CIGAR normalization: frame conversion, indel left-alignment and accuracy.
"""
from typing import List, Sequence, Tuple

from ovlrefine.alignment.cigar import CigarKind, CigarOp
from ovlrefine.core.models import Strand
from ovlrefine.errors import DegenerateAccuracyError


def get_proper_cigar(cigar: Sequence[CigarOp], is_target: bool, strand: Strand) -> List[CigarOp]:
    """
    Express a CIGAR in the frame a consumer needs.

    Args:
        cigar: CIGAR as computed against target + (oriented) query
        is_target: True if the target-relative CIGAR is wanted
        strand: Strand of the overlap the CIGAR belongs to

    Returns:
        A new list; the input is never modified
    """
    if is_target:
        return list(cigar)

    reversed_ops = [op.reverse() for op in cigar]
    if strand is Strand.REVERSE:
        reversed_ops.reverse()
    return reversed_ops


def _base(seq: bytes, index: int) -> int:
    # Negative indices would silently wrap around
    if index < 0:
        raise IndexError(f"sequence index {index} out of range")
    return seq[index]


def _shift_length(seq: bytes, pos: int, indel_length: int, limit: int) -> int:
    shift = 0
    while shift < limit:
        if _base(seq, pos - 1 - shift) != _base(seq, pos + indel_length - 1 - shift):
            break
        shift += 1
    return shift


def _is_interior_indel(cigar: Sequence[CigarOp], i: int) -> bool:
    return (0 < i < len(cigar) - 1
            and not cigar[i - 1].is_indel
            and not cigar[i + 1].is_indel)


def fix_cigar(cigar: List[CigarOp], target: bytes, query: bytes) -> Tuple[int, int]:
    """
    Left-align indels in place and compact the CIGAR.

    Every indel flanked on both sides by match/mismatch runs is moved to the
    leftmost position that spells the same sequences, as minimap2 does. An
    indel pushed to the very start is removed and its length returned as a
    shift of the alignment start on the corresponding sequence.

    Args:
        cigar: CIGAR to normalize, modified in place
        target: Target bases the CIGAR starts at
        query: Query bases the CIGAR starts at, in aligned orientation

    Returns:
        Tuple of (target_shift, query_shift)

    Raises:
        IndexError: If run lengths do not fit the given sequences
    """
    tpos, qpos = 0, 0
    for i in range(len(cigar)):
        op = cigar[i]
        if not op.is_indel:
            tpos += op.length
            qpos += op.length
            continue

        if _is_interior_indel(cigar, i):
            previous, following = cigar[i - 1], cigar[i + 1]
            if op.kind is CigarKind.INSERTION:
                shift = _shift_length(query, qpos, op.length, previous.length)
            else:
                shift = _shift_length(target, tpos, op.length, previous.length)

            if shift > 0:
                cigar[i - 1] = previous.with_length(previous.length - shift)
                cigar[i + 1] = following.with_length(following.length + shift)
                tpos -= shift
                qpos -= shift

        if op.kind is CigarKind.INSERTION:
            qpos += op.length
        else:
            tpos += op.length

    target_shift, query_shift = 0, 0
    start = 0
    while start < len(cigar):
        op = cigar[start]
        if op.is_indel:
            if op.kind is CigarKind.INSERTION:
                query_shift = op.length
            else:
                target_shift = op.length
            start += 1
            break
        if op.length > 0:
            break
        start += 1

    compacted: List[CigarOp] = []
    for op in cigar[start:]:
        if op.length == 0:
            continue
        if compacted and compacted[-1].kind is op.kind:
            compacted[-1] = compacted[-1].with_length(compacted[-1].length + op.length)
        else:
            compacted.append(op)

    cigar[:] = compacted
    return target_shift, query_shift


def calculate_accuracy(cigar: Sequence[CigarOp]) -> float:
    """
    Fraction of exact matches over all alignment columns.

    Raises:
        DegenerateAccuracyError: If the CIGAR covers no bases at all
    """
    totals = {kind: 0 for kind in CigarKind}
    for op in cigar:
        totals[op.kind] += op.length

    length = sum(totals.values())
    if length == 0:
        raise DegenerateAccuracyError("Cannot compute accuracy of an empty alignment")
    return totals[CigarKind.MATCH] / length
