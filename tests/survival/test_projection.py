"""
Tests for project(): S(t | x) = exp(-H0(t) exp(x @ beta)).

Tied example, cohort x = [1], exp(x @ beta) = 1/2:
    H  = [1/3, 2/3, 5/3, 5/3] at years 1..4
Year 4 lies past the last event time (3) and is held constant.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyannuity.core.exceptions import DimensionError, ValidationError
from pyannuity.survival import (
    SurvivalCurveSolution,
    baseline_hazard,
    coxph,
    project,
)


@pytest.fixture
def tied_model(tied_observations):
    fit = coxph(tied_observations)
    return fit, baseline_hazard(fit, tied_observations)


@pytest.fixture
def synthetic_model(small_synthetic):
    fit = coxph(small_synthetic)
    return fit, baseline_hazard(fit, small_synthetic)


class TestProjectionClosedForm:

    def test_tied_survival(self, tied_model):
        fit, baseline = tied_model
        curve = project(baseline, fit, [1.0], 4)

        assert isinstance(curve, SurvivalCurveSolution)
        assert_allclose(curve.horizon, [1, 2, 3, 4])
        expected_h = np.array([1 / 3, 2 / 3, 5 / 3, 5 / 3])
        assert_allclose(curve.cumulative_hazard, expected_h, rtol=1e-6)
        assert_allclose(curve.survival, np.exp(-expected_h), rtol=1e-6)
        assert curve.linear_predictor == pytest.approx(-np.log(2.0))

    def test_reference_individual_matches_baseline(self, tied_model):
        fit, baseline = tied_model
        curve = project(baseline, fit, [0.0], 3)
        assert_allclose(curve.survival, baseline.survival_at([1.0, 2.0, 3.0]))

    def test_extrapolation_flagged(self, tied_model):
        fit, baseline = tied_model
        curve = project(baseline, fit, [1.0], 4)

        assert list(curve.extrapolated) == [False, False, False, True]
        assert curve.last_event_time == 3.0
        assert len(curve.warnings) == 1
        assert "held constant" in curve.warnings[0]
        assert "*" in curve.summary()

    def test_no_warning_within_follow_up(self, tied_model):
        fit, baseline = tied_model
        curve = project(baseline, fit, [1.0], 3)
        assert not np.any(curve.extrapolated)
        assert curve.warnings == ()


class TestProjectionProperties:

    def test_bounded_and_non_increasing(self, synthetic_model):
        fit, baseline = synthetic_model
        curve = project(baseline, fit, [60.0, 0.0, 1.0], 20)
        assert len(curve) == 20
        assert np.all((curve.survival >= 0) & (curve.survival <= 1))
        assert np.all(np.diff(curve.survival) <= 0)

    def test_higher_risk_lower_survival(self, tied_model):
        fit, baseline = tied_model
        # beta < 0, so x = 0 is the higher-risk individual
        low = project(baseline, fit, [1.0], 3)
        high = project(baseline, fit, [0.0], 3)
        assert np.all(high.survival < low.survival)

    def test_horizon_one(self, synthetic_model):
        fit, baseline = synthetic_model
        curve = project(baseline, fit, [60.0, 0.0, 0.0], 1)
        assert len(curve) == 1
        assert curve.points[0][0] == 1

    def test_overflowing_risk_score_gives_zero(self, tied_model):
        fit, baseline = tied_model
        curve = project(baseline, fit, [-5000.0], 2)
        assert_allclose(curve.survival, [0.0, 0.0])

    def test_coefficient_array_accepted(self, tied_model):
        fit, baseline = tied_model
        a = project(baseline, fit, [1.0], 3)
        b = project(baseline, fit.coefficients, [1.0], 3)
        assert_allclose(a.survival, b.survival)

    def test_does_not_mutate_covariates(self, tied_model):
        fit, baseline = tied_model
        x = np.array([1.0])
        curve = project(baseline, fit, x, 3)
        x[0] = 99.0
        assert curve.covariates[0] == 1.0


class TestProjectionValidation:

    def test_covariate_length(self, synthetic_model):
        fit, baseline = synthetic_model
        with pytest.raises(DimensionError, match="covariates"):
            project(baseline, fit, [60.0, 0.0], 10)

    def test_horizon_zero(self, tied_model):
        fit, baseline = tied_model
        with pytest.raises(ValidationError, match="horizon"):
            project(baseline, fit, [1.0], 0)

    def test_horizon_float(self, tied_model):
        fit, baseline = tied_model
        with pytest.raises(ValidationError, match="horizon"):
            project(baseline, fit, [1.0], 2.5)

    def test_non_finite_covariates(self, tied_model):
        fit, baseline = tied_model
        with pytest.raises(ValidationError):
            project(baseline, fit, [np.inf], 2)

    def test_baseline_from_other_coefficients(self, synthetic_model):
        fit, baseline = synthetic_model
        other = fit.coefficients.copy()
        other[0] += 0.05
        with pytest.raises(ValidationError, match="baseline was built from"):
            project(baseline, other, [60.0, 0.0, 0.0], 10)

    def test_baseline_from_other_fit(self, tied_model, synthetic_model):
        _, tied_baseline = tied_model
        fit, _ = synthetic_model
        with pytest.raises(DimensionError, match="baseline was built from 1"):
            project(tied_baseline, fit, [60.0, 0.0, 0.0], 10)
