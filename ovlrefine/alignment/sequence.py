"""
Nucleotide helpers for strand handling.
"""
from Bio.Seq import reverse_complement as _bio_reverse_complement

from ovlrefine.errors import InvalidBaseError

_COMPLEMENT = {
    ord("A"): ord("T"),
    ord("C"): ord("G"),
    ord("G"): ord("C"),
    ord("T"): ord("A"),
}

_VALID_BASES = b"ACGT"


def complement(base: int) -> int:
    """Complement a single base given as a byte value."""
    try:
        return _COMPLEMENT[base]
    except KeyError:
        raise InvalidBaseError(base) from None


def validate_bases(seq: bytes) -> None:
    """Raise InvalidBaseError for the first byte outside {A,C,G,T}."""
    leftover = seq.translate(None, _VALID_BASES)
    if leftover:
        raise InvalidBaseError(leftover[0])


def reverse_complement(seq: bytes) -> bytes:
    """
    Reverse complement a nucleotide sequence.

    Only the four canonical bases are accepted; Biopython's IUPAC handling
    is not used as a fallback for ambiguous bases.

    Args:
        seq: Sequence over {A,C,G,T}

    Returns:
        A new bytes object with the reverse complement

    Raises:
        InvalidBaseError: If the sequence contains any other byte
    """
    seq = bytes(seq)
    validate_bases(seq)
    return _bio_reverse_complement(seq.decode("ascii")).encode("ascii")
