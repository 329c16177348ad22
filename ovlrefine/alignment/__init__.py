"""
CIGAR model, strand helpers, pairwise aligner and CIGAR normalization.
"""
