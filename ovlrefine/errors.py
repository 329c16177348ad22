"""
Exception hierarchy for overlap refinement.

Per-overlap errors are recorded by the orchestrator and never abort sibling
tasks. Errors about the read store itself signal corrupted input and fail the
whole run.
"""


class OverlapRefinementError(Exception):
    """Base class for all refinement errors."""
    pass


class InvalidBaseError(OverlapRefinementError, ValueError):
    """A byte outside {A,C,G,T} was found while complementing a sequence."""

    def __init__(self, base: int):
        self.base = base
        super().__init__(f"Invalid base: {bytes([base])!r}")


class InvalidCigarSymbolError(OverlapRefinementError, ValueError):
    """An unrecognized CIGAR operation symbol."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Invalid cigar op {symbol}")


class AlignmentFailureError(OverlapRefinementError):
    """The pairwise aligner could not produce an alignment trace."""
    pass


class DegenerateAccuracyError(OverlapRefinementError, ZeroDivisionError):
    """Accuracy was requested for a CIGAR with no aligned bases."""
    pass


class UnknownReadError(OverlapRefinementError, IndexError):
    """A read identifier that is not present in the read store."""
    pass


class CoordinateError(OverlapRefinementError, IndexError):
    """A coordinate range that does not fit inside its read."""
    pass


class ConfigurationError(OverlapRefinementError):
    """Custom exception for configuration errors."""
    pass
