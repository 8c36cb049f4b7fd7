"""
Shared compute infrastructure for PyAnnuity.

Submodules:
    timing: Execution timing utilities
"""

from pyannuity.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
