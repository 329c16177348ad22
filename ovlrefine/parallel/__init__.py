"""
Parallel processing module.

Provides the thread worker pool and the parallel overlap aligner.
"""
