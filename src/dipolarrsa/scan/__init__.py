"""
Parameter Scan
==============
Runs many independent replicas of the engine for every scanned interval
length and aggregates their deposition counts.

Note: This package owns the only shared resource of a scan, the result file.
The engine itself stays replica-local.
"""
