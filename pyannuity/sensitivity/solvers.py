"""
Public API for sensitivity analysis.

    analyze(observations, fit, covariates, horizon) → SensitivitySolution
"""

from __future__ import annotations

import warnings
from typing import Literal

from pyannuity.core.compute.timing import Timer
from pyannuity.core.exceptions import DimensionError
from pyannuity.core.result import Result
from pyannuity.core.validation import (
    check_in_range,
    check_integer,
    check_real,
    check_vector,
)
from pyannuity.data.design import ObservationSet
from pyannuity.sensitivity._analyze import (
    perturb_coefficient_sensitivity,
    scale_covariate_sensitivity,
)
from pyannuity.sensitivity._common import SensitivityParams
from pyannuity.sensitivity.solution import SensitivitySolution
from pyannuity.survival._risk import build_risk_sets
from pyannuity.survival.solution import CoxSolution


def analyze(
    observations: ObservationSet,
    fit: CoxSolution,
    covariates,
    horizon: int,
    *,
    method: Literal["scale_covariate", "perturb_coefficient"] = "scale_covariate",
    epsilon: float = 0.1,
    tol: float = 1e-8,
    max_iter: int = 50,
) -> SensitivitySolution:
    """Sensitivity of the cohort's projected survival to each coefficient.

    Parameters
    ----------
    observations : ObservationSet
        The set `fit` was estimated on. Not modified.
    fit : CoxSolution
        Original fit. Not modified.
    covariates : array-like
        (p,) cohort covariate vector [age, covariates...].
    horizon : int
        Projection horizon in years, >= 1.
    method : str
        "scale_covariate" (default): refit with age scaled by each β_k and
        report against β_k. "perturb_coefficient": scale β_k by
        (1 + epsilon) without refitting and report against the new value.
    epsilon : float
        Relative perturbation for "perturb_coefficient".
    tol, max_iter
        Newton-Raphson settings for the "scale_covariate" refits.

    Returns
    -------
    SensitivitySolution
        One entry per fitted coefficient. An entry whose refit fails
        records NaN and a warning; the remaining entries are unaffected.
    """
    if method not in ("scale_covariate", "perturb_coefficient"):
        raise ValueError(
            f"method must be 'scale_covariate' or 'perturb_coefficient', "
            f"got '{method}'"
        )

    if len(fit.coefficients) != observations.p:
        raise DimensionError(
            f"fit has {len(fit.coefficients)} coefficients but observations "
            f"have {observations.p} covariates"
        )

    x = check_vector(covariates, observations.p, "covariates")
    horizon = check_integer(horizon, "horizon")
    check_in_range(horizon, 1, None, "horizon")
    epsilon = check_real(epsilon, "epsilon")
    tol = check_real(tol, "tol")
    check_in_range(tol, 0.0, None, "tol", low_inclusive=False)
    max_iter = check_integer(max_iter, "max_iter")
    check_in_range(max_iter, 1, None, "max_iter")

    timer = Timer()
    timer.start()

    with timer.section('risk_sets'):
        risk = build_risk_sets(observations.time, observations.event)

    with timer.section(method):
        if method == "scale_covariate":
            perturbed, metrics, converged, messages = scale_covariate_sensitivity(
                observations, fit.coefficients, x, horizon, risk,
                tol=tol, max_iter=max_iter,
            )
        else:
            perturbed, metrics, converged, messages = perturb_coefficient_sensitivity(
                observations, fit.coefficients, x, horizon, risk,
                epsilon=epsilon, base_converged=fit.converged,
            )

    timer.stop()

    for msg in messages:
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    params = SensitivityParams(
        covariate_names=tuple(observations.covariate_names),
        base_coefficients=fit.coefficients.copy(),
        perturbed_coefficients=perturbed,
        price_metrics=metrics,
        converged=converged,
        method=method,
        epsilon=epsilon if method == "perturb_coefficient" else None,
        horizon=horizon,
    )

    result = Result(
        params=params,
        info={
            "method": method,
            "n_entries": len(perturbed),
            "metric": "sum of projected survival probabilities",
        },
        timing=timer.result(),
        backend_name=f"cpu_{method}",
        warnings=tuple(messages),
    )

    return SensitivitySolution(_result=result)
