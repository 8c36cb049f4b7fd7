"""
Core infrastructure for PyAnnuity.

Shared abstractions used by every domain subpackage (survival, pricing,
sensitivity).

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing utilities
"""

from pyannuity.core.result import Result
from pyannuity.core.exceptions import (
    PyAnnuityError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyAnnuityError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
]
