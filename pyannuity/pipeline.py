"""
End-to-end pricing pipeline.

    compute_pipeline(inputs) → PipelineSolution
        generate → run_pipeline

    run_pipeline(observations, query) → PipelineSolution
        coxph → baseline_hazard → project → price_annuity → (analyze)

Every call is a pure function of its inputs: no module state, no global
random state, nothing mutated. The host decides what to keep. For hosts
that may start a new run before the previous one finishes, LatestResult
keeps only the newest run's output (last result wins).
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

import numpy as np

from pyannuity.core.compute.timing import timed
from pyannuity.core.exceptions import DimensionError, PyAnnuityError
from pyannuity.core.validation import (
    check_array,
    check_finite,
    check_in_range,
    check_integer,
    check_real,
)
from pyannuity.data.design import ObservationSet
from pyannuity.data.synthetic import GeneratorConfig, generate
from pyannuity.pricing.solution import AnnuitySolution
from pyannuity.pricing.solvers import price_annuity
from pyannuity.sensitivity.solution import SensitivitySolution
from pyannuity.sensitivity.solvers import analyze
from pyannuity.survival.solution import (
    BaselineSolution,
    CoxSolution,
    SurvivalCurveSolution,
)
from pyannuity.survival.solvers import baseline_hazard, coxph, project

T = TypeVar('T')

# Recognized query ranges
COHORT_AGE_RANGE = (20, 80)
PROJECTION_YEARS_RANGE = (1, 20)
DISCOUNT_RATE_RANGE = (0.01, 0.10)


@dataclass(frozen=True)
class QueryParams:
    """Cohort and pricing parameters for one run.

    Attributes:
        cohort_age: Age of the priced cohort, 20..80.
        projection_years: Annuity term in years, 1..20.
        discount_rate: Annual effective rate, 0.01..0.10.
        cohort_covariates: Non-age covariates of the cohort. None means all
            zeros (the reference individual).
        deferral: Years before the first payment.
    """

    cohort_age: int = 60
    projection_years: int = 10
    discount_rate: float = 0.05
    cohort_covariates: tuple[float, ...] | None = None
    deferral: int = 0

    def __post_init__(self) -> None:
        check_in_range(check_integer(self.cohort_age, "cohort_age"), *COHORT_AGE_RANGE, "cohort_age")
        check_in_range(
            check_integer(self.projection_years, "projection_years"),
            *PROJECTION_YEARS_RANGE, "projection_years",
        )
        check_in_range(
            check_real(self.discount_rate, "discount_rate"),
            *DISCOUNT_RATE_RANGE, "discount_rate",
        )
        check_in_range(
            check_integer(self.deferral, "deferral"), 0, self.projection_years - 1, "deferral",
        )
        if self.cohort_covariates is not None:
            check_finite(check_array(self.cohort_covariates, "cohort_covariates"), "cohort_covariates")

    def covariate_vector(self, p: int) -> np.ndarray:
        """Cohort design row [age, covariates...] for a p-column model."""
        if self.cohort_covariates is None:
            rest = np.zeros(p - 1)
        else:
            rest = np.asarray(self.cohort_covariates, dtype=np.float64).ravel()
            if rest.shape[0] != p - 1:
                raise DimensionError(
                    f"cohort_covariates: expected {p - 1} values, got {rest.shape[0]}"
                )
        return np.concatenate([[float(self.cohort_age)], rest])


@dataclass(frozen=True)
class PipelineInputs:
    """Everything one compute_pipeline() run depends on."""

    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    query: QueryParams = field(default_factory=QueryParams)
    sensitivity: bool = True
    sensitivity_method: Literal["scale_covariate", "perturb_coefficient"] = "scale_covariate"
    tol: float = 1e-8
    max_iter: int = 50


@dataclass(frozen=True)
class PipelineSolution:
    """Outputs of one run, in pipeline order."""

    observations: ObservationSet
    fit: CoxSolution
    baseline: BaselineSolution
    survival: SurvivalCurveSolution
    quote: AnnuitySolution
    sensitivity: SensitivitySolution | None
    query: QueryParams
    timing: dict[str, float] = field(default_factory=dict)  # seconds per stage

    @property
    def converged(self) -> bool:
        """Whether the Cox fit converged; display it next to the price."""
        return self.fit.converged

    @property
    def total_present_value(self) -> float:
        return self.quote.total_present_value

    @property
    def warnings(self) -> tuple[str, ...]:
        """Warnings from every stage, de-duplicated, in pipeline order."""
        stages = [self.fit, self.baseline, self.survival, self.quote]
        if self.sensitivity is not None:
            stages.append(self.sensitivity)
        seen: dict[str, None] = {}
        for stage in stages:
            for w in stage.warnings:
                seen.setdefault(w, None)
        return tuple(seen)

    def summary(self) -> str:
        parts = [
            self.fit.summary(),
            self.survival.summary(),
            self.quote.summary(),
        ]
        if self.sensitivity is not None:
            parts.append(self.sensitivity.summary())
        if self.warnings:
            parts.append("Warnings:\n" + "\n".join(f"  - {w}" for w in self.warnings))
        return "\n\n".join(parts)


@dataclass(frozen=True)
class PipelineOutcome:
    """Typed result of try_compute_pipeline(): a solution or an error."""

    solution: PipelineSolution | None
    error: PyAnnuityError | None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_pipeline(
    observations: ObservationSet,
    query: QueryParams,
    *,
    sensitivity: bool = True,
    sensitivity_method: Literal["scale_covariate", "perturb_coefficient"] = "scale_covariate",
    tol: float = 1e-8,
    max_iter: int = 50,
) -> PipelineSolution:
    """Fit, project and price for one cohort.

    Parameters
    ----------
    observations : ObservationSet
    query : QueryParams
    sensitivity : bool
        Run the sensitivity analysis (one refit per coefficient).
    sensitivity_method : str
        Passed to sensitivity.analyze().
    tol, max_iter
        Newton-Raphson settings for every fit in the run.

    Returns
    -------
    PipelineSolution
        A non-converged fit still produces a full solution; check
        `converged` and `warnings`.
    """
    x = query.covariate_vector(observations.p)
    report = None

    with timed() as timer:
        with timer.section('fit'):
            fit = coxph(observations, tol=tol, max_iter=max_iter)
        with timer.section('projection'):
            baseline = baseline_hazard(fit, observations)
            curve = project(baseline, fit, x, query.projection_years)
        with timer.section('pricing'):
            quote = price_annuity(curve, query.discount_rate, deferral=query.deferral)
        if sensitivity:
            with timer.section('sensitivity'):
                report = analyze(
                    observations, fit, x, query.projection_years,
                    method=sensitivity_method, tol=tol, max_iter=max_iter,
                )

    return PipelineSolution(
        observations=observations,
        fit=fit,
        baseline=baseline,
        survival=curve,
        quote=quote,
        sensitivity=report,
        query=query,
        timing=timer.result(),
    )


def compute_pipeline(inputs: PipelineInputs | None = None) -> PipelineSolution:
    """Generate the seeded observation set and run the pipeline on it."""
    if inputs is None:
        inputs = PipelineInputs()
    observations = generate(inputs.generator)
    return run_pipeline(
        observations,
        inputs.query,
        sensitivity=inputs.sensitivity,
        sensitivity_method=inputs.sensitivity_method,
        tol=inputs.tol,
        max_iter=inputs.max_iter,
    )


def try_compute_pipeline(inputs: PipelineInputs | None = None) -> PipelineOutcome:
    """compute_pipeline() returning library failures as a PipelineOutcome."""
    try:
        return PipelineOutcome(solution=compute_pipeline(inputs), error=None)
    except PyAnnuityError as e:
        return PipelineOutcome(solution=None, error=e)


class LatestResult(Generic[T]):
    """Thread-safe last-result-wins slot for overlapping runs.

    Usage:
        slot = LatestResult()
        ticket = slot.begin()
        solution = compute_pipeline(inputs)   # possibly on a worker thread
        slot.publish(ticket, solution)        # ignored if a newer run published
        slot.latest
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_ticket = 0
        self._published_ticket = -1
        self._value: T | None = None

    def begin(self) -> int:
        """Reserve a ticket for a new run; later tickets supersede it."""
        with self._lock:
            ticket = self._next_ticket
            self._next_ticket += 1
            return ticket

    def publish(self, ticket: int, value: T) -> bool:
        """Store `value` unless a newer ticket has already been published."""
        with self._lock:
            if ticket < self._published_ticket:
                return False
            self._published_ticket = ticket
            self._value = value
            return True

    @property
    def latest(self) -> T | None:
        with self._lock:
            return self._value

    @property
    def latest_ticket(self) -> int:
        """Ticket of the stored value, -1 if nothing has been published."""
        with self._lock:
            return self._published_ticket
