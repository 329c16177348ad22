"""
Read and overlap data model and file I/O.
"""
