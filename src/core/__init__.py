"""
Core data structures and numeric invariants.

This package contains the binned numeric substrate over which hazard
calculations iterate. It is independent of ground-motion models,
geometry, and any I/O layer.
"""
