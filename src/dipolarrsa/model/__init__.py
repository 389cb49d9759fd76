"""
The MODEL layer contains pure data structures.
Gaps, partitions and the deposition table live here, together with the
scan settings/results container and its HDF5 persistence.
"""
