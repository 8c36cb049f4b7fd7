"""
Tests for the end-to-end pipeline and the last-result-wins slot.
"""

import threading

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyannuity.core.exceptions import DimensionError, ValidationError
from pyannuity.data import GeneratorConfig
from pyannuity.pipeline import (
    LatestResult,
    PipelineInputs,
    PipelineSolution,
    QueryParams,
    compute_pipeline,
    run_pipeline,
    try_compute_pipeline,
)


@pytest.fixture(scope="module")
def default_run():
    return compute_pipeline()


# ═══════════════════════════════════════════════════════════════════════
# Default scenario
# ═══════════════════════════════════════════════════════════════════════


class TestDefaultRun:
    """n=1000, seed=42, cohort age 60, 10 years at 5%."""

    def test_fit_converges(self, default_run):
        assert isinstance(default_run, PipelineSolution)
        assert default_run.converged
        assert default_run.fit.n_iter <= 50
        assert default_run.fit.n_observations == 1000

    def test_price_in_range(self, default_run):
        assert 0.0 < default_run.total_present_value < 10.0
        assert len(default_run.quote.yearly_values) == 10

    def test_survival_curve(self, default_run):
        survival = default_run.survival.survival
        assert len(survival) == 10
        assert np.all((survival >= 0) & (survival <= 1))
        assert np.all(np.diff(survival) <= 0)
        assert_allclose(default_run.survival.covariates, [60.0, 0.0, 0.0])

    def test_sensitivity_has_one_entry_per_coefficient(self, default_run):
        assert default_run.sensitivity is not None
        assert len(default_run.sensitivity) == 3
        assert default_run.sensitivity.method == "scale_covariate"

    def test_summary_covers_stages(self, default_run):
        summary = default_run.summary()
        assert "Call: coxph()" in summary
        assert "Call: project()" in summary
        assert "Total present value=" in summary

    def test_timing_per_stage(self, default_run):
        timing = default_run.timing
        assert list(timing) == ["total_seconds", "fit", "projection", "pricing", "sensitivity"]
        assert all(seconds >= 0.0 for seconds in timing.values())
        assert timing["total_seconds"] >= timing["fit"]

    def test_idempotent(self, default_run):
        again = compute_pipeline()
        assert again.total_present_value == default_run.total_present_value
        assert_allclose(again.fit.coefficients, default_run.fit.coefficients, rtol=0, atol=0)
        assert_allclose(again.sensitivity.price_metrics, default_run.sensitivity.price_metrics)


# ═══════════════════════════════════════════════════════════════════════
# Query variations
# ═══════════════════════════════════════════════════════════════════════


class TestQueryVariations:

    def test_horizon_one(self, small_synthetic):
        solution = run_pipeline(
            small_synthetic, QueryParams(projection_years=1), sensitivity=False,
        )
        assert len(solution.survival) == 1
        assert solution.sensitivity is None
        assert "sensitivity" not in solution.timing
        expected = solution.survival.survival[0] / 1.05
        assert solution.total_present_value == pytest.approx(expected)

    def test_rate_monotonicity(self, small_synthetic):
        low = run_pipeline(small_synthetic, QueryParams(discount_rate=0.02), sensitivity=False)
        high = run_pipeline(small_synthetic, QueryParams(discount_rate=0.08), sensitivity=False)
        assert high.total_present_value < low.total_present_value

    def test_deferral(self, small_synthetic):
        solution = run_pipeline(
            small_synthetic, QueryParams(projection_years=5, deferral=2), sensitivity=False,
        )
        assert_allclose(solution.quote.present_values[:2], 0.0)

    def test_cohort_covariates(self, small_synthetic):
        solution = run_pipeline(
            small_synthetic,
            QueryParams(cohort_covariates=(0.5, 1.0)),
            sensitivity=False,
        )
        assert_allclose(solution.survival.covariates, [60.0, 0.5, 1.0])

    def test_cohort_covariates_wrong_length(self, small_synthetic):
        with pytest.raises(DimensionError):
            run_pipeline(small_synthetic, QueryParams(cohort_covariates=(0.5,)), sensitivity=False)

    def test_perturb_method(self, small_synthetic):
        solution = run_pipeline(
            small_synthetic, QueryParams(), sensitivity_method="perturb_coefficient",
        )
        assert solution.sensitivity.method == "perturb_coefficient"

    def test_non_converged_fit_still_prices(self, small_synthetic):
        with pytest.warns(RuntimeWarning):
            solution = run_pipeline(small_synthetic, QueryParams(), sensitivity=False, max_iter=1)
        assert not solution.converged
        assert np.isfinite(solution.total_present_value)
        assert any("did not converge" in w for w in solution.warnings)


class TestQueryParams:

    def test_defaults(self):
        query = QueryParams()
        assert (query.cohort_age, query.projection_years, query.discount_rate) == (60, 10, 0.05)
        assert_allclose(query.covariate_vector(3), [60.0, 0.0, 0.0])

    @pytest.mark.parametrize("kwargs", [
        {"cohort_age": 19},
        {"cohort_age": 81},
        {"cohort_age": 60.5},
        {"projection_years": 0},
        {"projection_years": 21},
        {"discount_rate": 0.005},
        {"discount_rate": 0.11},
        {"deferral": 10},
        {"cohort_covariates": (np.nan, 1.0)},
    ])
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValidationError):
            QueryParams(**kwargs)

    @pytest.mark.parametrize("kwargs", [
        {"cohort_age": 20},
        {"cohort_age": 80},
        {"projection_years": 20},
        {"discount_rate": 0.01},
        {"discount_rate": 0.10},
    ])
    def test_bounds_inclusive(self, kwargs):
        QueryParams(**kwargs)


# ═══════════════════════════════════════════════════════════════════════
# Error outcomes
# ═══════════════════════════════════════════════════════════════════════


class TestTryCompute:

    def test_success(self):
        inputs = PipelineInputs(
            generator=GeneratorConfig(sample_size=100, seed=1), sensitivity=False,
        )
        outcome = try_compute_pipeline(inputs)
        assert outcome.ok
        assert outcome.error is None
        assert outcome.solution.fit.n_observations == 100

    def test_failure_is_returned(self):
        inputs = PipelineInputs(
            generator=GeneratorConfig(sample_size=10, event_probability=0.0),
        )
        outcome = try_compute_pipeline(inputs)
        assert not outcome.ok
        assert outcome.solution is None
        assert isinstance(outcome.error, ValidationError)
        assert "at least one event" in str(outcome.error)

    def test_failure_raises_from_compute(self):
        inputs = PipelineInputs(generator=GeneratorConfig(sample_size=10, event_probability=0.0))
        with pytest.raises(ValidationError):
            compute_pipeline(inputs)


# ═══════════════════════════════════════════════════════════════════════
# LatestResult
# ═══════════════════════════════════════════════════════════════════════


class TestLatestResult:

    def test_empty(self):
        slot = LatestResult()
        assert slot.latest is None
        assert slot.latest_ticket == -1

    def test_newer_result_wins(self):
        slot = LatestResult()
        first = slot.begin()
        second = slot.begin()

        assert slot.publish(second, "second") is True
        # The older run finishes late and is discarded
        assert slot.publish(first, "first") is False
        assert slot.latest == "second"
        assert slot.latest_ticket == second

    def test_in_order_publishes(self):
        slot = LatestResult()
        for i in range(3):
            assert slot.publish(slot.begin(), i)
        assert slot.latest == 2

    def test_concurrent_publishers(self):
        slot = LatestResult()
        tickets = [slot.begin() for _ in range(20)]
        barrier = threading.Barrier(len(tickets))

        def worker(ticket):
            barrier.wait()
            slot.publish(ticket, ticket)

        threads = [threading.Thread(target=worker, args=(t,)) for t in reversed(tickets)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert slot.latest == tickets[-1]
        assert slot.latest_ticket == tickets[-1]
