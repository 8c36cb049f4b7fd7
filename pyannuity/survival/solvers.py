"""
Public API for survival modelling.

    coxph(observations) → CoxSolution
    baseline_hazard(fit, observations) → BaselineSolution
    project(baseline, fit, covariates, horizon) → SurvivalCurveSolution

Each function validates inputs, dispatches to the computational routine,
and wraps the Result in a Solution.
"""

from __future__ import annotations

import warnings
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from pyannuity.core.compute.timing import Timer
from pyannuity.core.exceptions import DimensionError, ValidationError
from pyannuity.core.result import Result
from pyannuity.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_in_range,
    check_integer,
    check_real,
    check_vector,
)
from pyannuity.data.design import ObservationSet
from pyannuity.survival._baseline import breslow_baseline
from pyannuity.survival._cox import cox_fit
from pyannuity.survival._projection import project_survival
from pyannuity.survival._risk import build_risk_sets
from pyannuity.survival.solution import (
    BaselineSolution,
    CoxSolution,
    SurvivalCurveSolution,
)


def coxph(
    observations: ObservationSet,
    *,
    init=None,
    strata=None,
    ties: Literal["breslow"] = "breslow",
    tol: float = 1e-8,
    max_iter: int = 50,
) -> CoxSolution:
    """Cox proportional hazards model.

    Covariates are the observation set's design matrix [age | covariates].
    Tied event times use Breslow's approximation.

    Parameters
    ----------
    observations : ObservationSet
        Validated fitting input (non-empty, at least one event).
    init : array-like or None
        Starting coefficients (p,). None means zeros.
    strata : None
        Stratified Cox is not supported.
    ties : str
        Only "breslow".
    tol : float
        Relative log-likelihood tolerance for Newton-Raphson.
    max_iter : int
        Maximum Newton-Raphson iterations.

    Returns
    -------
    CoxSolution
        converged=False (with a RuntimeWarning) when the iteration cap is
        reached, the information matrix turns singular mid-run, or a
        coefficient diverges under monotone likelihood. The reason is in
        `termination`.

    Raises
    ------
    ValidationError
        Bad tolerance, iteration cap or starting coefficients.
    SingularMatrixError
        Information matrix singular at the starting coefficients.
    """
    if ties != "breslow":
        raise ValueError(f"ties must be 'breslow', got '{ties}'")

    if strata is not None:
        raise NotImplementedError(
            "Stratified Cox PH is not supported"
        )

    tol = check_real(tol, "tol")
    check_in_range(tol, 0.0, None, "tol", low_inclusive=False)
    max_iter = check_integer(max_iter, "max_iter")
    check_in_range(max_iter, 1, None, "max_iter")

    init_arr = None
    if init is not None:
        init_arr = check_vector(init, observations.p, "init")

    timer = Timer()
    timer.start()

    with timer.section('risk_sets'):
        risk = build_risk_sets(observations.time, observations.event)

    with timer.section('newton_raphson'):
        params = cox_fit(
            observations.time, observations.event, observations.design_matrix,
            observations.covariate_names,
            init=init_arr,
            tol=tol,
            max_iter=max_iter,
            risk=risk,
        )

    timer.stop()

    warnings_list = []
    if not params.converged:
        msg = _non_convergence_message(params, max_iter)
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)
    elif params.covariance is None:
        warnings_list.append(
            "Information matrix is singular at the optimum; covariance unavailable"
        )

    result = Result(
        params=params,
        info={
            "method": "Cox PH",
            "ties": ties,
            "n_iter": params.n_iter,
            "converged": params.converged,
            "termination": params.termination,
            "tol": tol,
            "max_iter": max_iter,
        },
        timing=timer.result(),
        backend_name="cpu_cox",
        warnings=tuple(warnings_list),
    )

    return CoxSolution(_result=result)


def baseline_hazard(
    fit: CoxSolution,
    observations: ObservationSet,
) -> BaselineSolution:
    """Breslow cumulative baseline hazard for a fitted Cox model.

    Parameters
    ----------
    fit : CoxSolution
        Model fitted on `observations`.
    observations : ObservationSet
        The observation set the model was fitted on.

    Returns
    -------
    BaselineSolution

    Raises
    ------
    DimensionError
        If the fit does not match the observation set.
    NumericalError
        On an empty risk set or a zero risk-set sum.
    """
    beta = _coefficients_of(fit)
    if len(beta) != observations.p:
        raise DimensionError(
            f"fit has {len(beta)} coefficients but observations have "
            f"{observations.p} covariates"
        )
    if isinstance(fit, CoxSolution) and fit.n_observations != observations.n:
        raise DimensionError(
            f"fit was estimated on {fit.n_observations} observations, "
            f"got an observation set of {observations.n}"
        )

    timer = Timer()
    timer.start()

    with timer.section('breslow'):
        params = breslow_baseline(
            observations.design_matrix,
            beta,
            build_risk_sets(observations.time, observations.event),
        )

    timer.stop()

    warnings_list = []
    if isinstance(fit, CoxSolution) and not fit.converged:
        warnings_list.append("Baseline built from a non-converged Cox fit")

    result = Result(
        params=params,
        info={"method": "Breslow", "n_event_times": len(params.time)},
        timing=timer.result(),
        backend_name="cpu_breslow",
        warnings=tuple(warnings_list),
    )

    return BaselineSolution(_result=result)


def project(
    baseline: BaselineSolution,
    fit,
    covariates,
    horizon: int,
) -> SurvivalCurveSolution:
    """Project individual survival S(t | x) = S0(t) ** exp(x @ β).

    Parameters
    ----------
    baseline : BaselineSolution
        Breslow baseline for the fit.
    fit : CoxSolution or array-like
        Fitted model (or its coefficient vector).
    covariates : array-like
        (p,) cohort covariate vector [age, covariates...].
    horizon : int
        Number of yearly steps, >= 1.

    Returns
    -------
    SurvivalCurveSolution
        If the horizon passes the last observed event time, the baseline
        is held at its last value for the remaining years and a warning
        records it.

    Raises
    ------
    DimensionError
        Coefficient or covariate vector of the wrong length.
    ValidationError
        If the baseline was built from different coefficients.
    """
    beta = _coefficients_of(fit)
    _check_same_fit(baseline, beta)
    x = check_vector(covariates, len(beta), "covariates")
    horizon = check_integer(horizon, "horizon")
    check_in_range(horizon, 1, None, "horizon")

    timer = Timer()
    timer.start()

    with timer.section('projection'):
        params = project_survival(baseline.params, beta, x, horizon)

    timer.stop()

    warnings_list = []
    n_extra = int(np.sum(params.extrapolated))
    if n_extra > 0:
        warnings_list.append(
            f"Horizon {horizon} exceeds the last event time "
            f"{params.last_event_time:.4g}; baseline hazard held constant "
            f"for the final {n_extra} year(s)"
        )

    result = Result(
        params=params,
        info={"method": "Breslow projection", "horizon": horizon},
        timing=timer.result(),
        backend_name="cpu_projection",
        warnings=tuple(warnings_list),
    )

    return SurvivalCurveSolution(_result=result)


def _non_convergence_message(params, max_iter: int) -> str:
    if params.termination == "singular_information":
        return (
            f"Newton-Raphson did not converge: the information matrix became "
            f"singular after {params.n_iter} iterations; returning the last iterate"
        )
    if params.termination == "monotone_likelihood":
        return (
            f"Newton-Raphson did not converge: the partial likelihood is monotone "
            f"in {list(params.diverging)}, so the coefficient may be infinite "
            f"(stopped after {params.n_iter} iterations)"
        )
    return (
        f"Newton-Raphson did not converge in {params.n_iter} iterations "
        f"(max_iter={max_iter}); returning the last iterate"
    )


def _check_same_fit(baseline: BaselineSolution, beta: NDArray) -> None:
    """The baseline must come from the coefficients being projected."""
    built_from = baseline.params.coefficients
    if len(built_from) != len(beta):
        raise DimensionError(
            f"baseline was built from {len(built_from)} coefficients, "
            f"got {len(beta)}"
        )
    if not np.allclose(beta, built_from):
        raise ValidationError(
            f"coefficients {beta.tolist()} do not match the coefficients "
            f"{built_from.tolist()} the baseline was built from"
        )


def _coefficients_of(fit) -> NDArray:
    if isinstance(fit, CoxSolution):
        return fit.coefficients
    beta = check_array(fit, "coefficients")
    check_1d(beta, "coefficients")
    check_finite(beta, "coefficients")
    return beta

