"""
Tests for the PyAnnuity exception hierarchy.

Validates:
    - Inheritance: every library error is a PyAnnuityError
    - DimensionError is a ValidationError
    - Diagnostic attributes on NumericalError and SingularMatrixError
"""

import numpy as np
import pytest

from pyannuity.core.exceptions import (
    DimensionError,
    NumericalError,
    PyAnnuityError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestHierarchy:
    """Every exception is catchable as PyAnnuityError."""

    @pytest.mark.parametrize("exc", [
        ValidationError, DimensionError, NumericalError, SingularMatrixError,
    ])
    def test_is_pyannuity_error(self, exc):
        with pytest.raises(PyAnnuityError):
            raise exc("boom")

    def test_dimension_error_is_validation_error(self):
        assert issubclass(DimensionError, ValidationError)

    def test_singular_is_numerical(self):
        assert issubclass(SingularMatrixError, NumericalError)

    def test_validation_is_not_numerical(self):
        assert not issubclass(ValidationError, NumericalError)


# ═══════════════════════════════════════════════════════════════════════
# NumericalError
# ═══════════════════════════════════════════════════════════════════════


class TestNumericalError:
    """NumericalError carries the failing time and coefficients."""

    def test_message(self):
        err = NumericalError("risk-set sum is zero")
        assert str(err) == "risk-set sum is zero"

    def test_defaults_are_none(self):
        err = NumericalError("failed")
        assert err.time is None
        assert err.coefficients is None

    def test_attributes(self):
        err = NumericalError("failed", time=3.5, coefficients=np.array([0.1, 0.2]))
        assert err.time == 3.5
        np.testing.assert_array_equal(err.coefficients, [0.1, 0.2])


# ═══════════════════════════════════════════════════════════════════════
# SingularMatrixError
# ═══════════════════════════════════════════════════════════════════════


class TestSingularMatrixError:
    """SingularMatrixError carries matrix diagnostic attributes."""

    def test_all_attributes(self):
        err = SingularMatrixError(
            "information is singular",
            matrix_name="information",
            condition_number=1e18,
            coefficients=np.zeros(2),
        )
        assert str(err) == "information is singular"
        assert err.matrix_name == "information"
        assert err.condition_number == 1e18
        np.testing.assert_array_equal(err.coefficients, [0.0, 0.0])
        assert err.time is None

    def test_defaults_are_none(self):
        err = SingularMatrixError("singular")
        assert err.matrix_name is None
        assert err.condition_number is None
        assert err.coefficients is None

    def test_catchable_with_attributes(self):
        with pytest.raises(SingularMatrixError) as exc_info:
            raise SingularMatrixError(
                "singular", matrix_name="A", condition_number=1e15
            )
        assert exc_info.value.matrix_name == "A"
        assert exc_info.value.condition_number == 1e15
