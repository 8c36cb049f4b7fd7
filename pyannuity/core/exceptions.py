"""
Exception hierarchy for PyAnnuity.

All exceptions inherit from PyAnnuityError so a host can catch any
library failure in one place and let the user retry with new inputs.

    PyAnnuityError
    ├── ValidationError          malformed observations or query parameters
    │   └── DimensionError       inconsistent shapes / covariate counts
    └── NumericalError           computation cannot proceed
        └── SingularMatrixError  non-invertible information matrix

Non-convergence of Newton-Raphson is deliberately absent: a fit that hits
the iteration cap is a normal result with converged=False.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from typing import Any


class PyAnnuityError(Exception):
    """Base exception for all PyAnnuity errors."""
    pass


class ValidationError(PyAnnuityError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks: empty
    observation sets, sets without events, non-positive follow-up times,
    or out-of-range query parameters.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions, e.g. a cohort
    covariate vector whose length differs from the fitted coefficients.
    """
    pass


class NumericalError(PyAnnuityError):
    """
    Numerical computation failed.

    Attributes:
        time: Event time at which the failure occurred, if applicable
        coefficients: Coefficient iterate in use when the failure occurred
    """

    def __init__(
        self,
        message: str,
        time: float | None = None,
        coefficients: Any = None,
    ):
        super().__init__(message)
        self.time = time
        self.coefficients = coefficients


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when the Newton-Raphson information matrix cannot be inverted at
    the starting point, so the fit cannot even take a first step.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        coefficients: Coefficient iterate at which the matrix was evaluated
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        coefficients: Any = None,
    ):
        super().__init__(message, coefficients=coefficients)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
