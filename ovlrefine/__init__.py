"""
ovlrefine: refinement of long-read overlaps into normalized alignments.
"""

__version__ = "0.1.0"

from .alignment.cigar import CigarKind, CigarOp, cigar_to_string, parse_cigar
from .alignment.normalize import calculate_accuracy, fix_cigar, get_proper_cigar
from .alignment.sequence import reverse_complement
from .alignment.aligner import BiopythonAligner, PairwiseAligner
from .core.models import AlignmentResult, Overlap, ReadRecord, Strand
from .core.io import ReadStore, load_overlaps, write_overlaps
from .parallel.orchestrator import RefinementReport, align_overlaps, refined

__all__ = [
    "CigarKind",
    "CigarOp",
    "cigar_to_string",
    "parse_cigar",
    "calculate_accuracy",
    "fix_cigar",
    "get_proper_cigar",
    "reverse_complement",
    "BiopythonAligner",
    "PairwiseAligner",
    "AlignmentResult",
    "Overlap",
    "ReadRecord",
    "Strand",
    "ReadStore",
    "load_overlaps",
    "write_overlaps",
    "RefinementReport",
    "align_overlaps",
    "refined",
]
