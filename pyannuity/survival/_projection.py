"""
Individual survival projection from a Breslow baseline.

    S(t | x) = S0(t) ** exp(x @ β) = exp(-H0(t) * exp(x @ β))

evaluated at t = 1, 2, ..., horizon with the step-function H0.

Beyond the last observed event time H0 is held at its last value: there
are no risk sets to estimate further hazard from, so the projection does
not extrapolate. Those years are flagged in `extrapolated`.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyannuity.survival._baseline import step_cumulative_hazard
from pyannuity.survival._common import BaselineParams, SurvivalCurveParams


def project_survival(
    baseline: BaselineParams,
    beta: NDArray,
    covariates: NDArray,
    horizon: int,
) -> SurvivalCurveParams:
    """Project S(t | x) at integer horizons 1..horizon.

    Parameters
    ----------
    baseline : BaselineParams
    beta : NDArray
        (p,) coefficients matching the baseline.
    covariates : NDArray
        (p,) cohort covariate vector, [age, covariates...].
    horizon : int
        Number of yearly steps, >= 1.

    Returns
    -------
    SurvivalCurveParams
    """
    t = np.arange(1, horizon + 1, dtype=np.float64)
    H0 = step_cumulative_hazard(baseline.time, baseline.cumulative_hazard, t)

    eta = float(covariates @ beta)
    with np.errstate(over="ignore"):
        risk_score = np.exp(eta)

    # H0 == 0 before the first event: S = 1 even when exp(eta) overflows
    with np.errstate(invalid="ignore", over="ignore"):
        H = np.where(H0 > 0, H0 * risk_score, 0.0)
    survival = np.exp(-H)

    last_event_time = float(baseline.time[-1])

    return SurvivalCurveParams(
        horizon=np.arange(1, horizon + 1),
        survival=survival,
        cumulative_hazard=H,
        covariates=np.array(covariates, dtype=np.float64, copy=True),
        linear_predictor=eta,
        extrapolated=t > last_event_time,
        last_event_time=last_event_time,
    )
