"""
Breslow estimator of the cumulative baseline hazard.

For each distinct event time t_k with d_k events:

    dH0(t_k) = d_k / Σ_{j ∈ R(t_k)} exp(x_j @ β)
    H0(t)    = Σ_{t_k <= t} dH0(t_k)
    S0(t)    = exp(-H0(t))

H0 is a right-continuous step function: 0 before the first event time,
constant between event times, and held at its last value after the last
event time.

The baseline is for the covariate vector x = 0 (no centering), so an
individual's survival is S0(t) ** exp(x @ β).

References:
    Breslow, N. (1972). Discussion of Professor Cox's paper. JRSS-B, 34, 216-217.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyannuity.core.exceptions import NumericalError
from pyannuity.survival._common import BaselineParams
from pyannuity.survival._risk import RiskSetIndex, risk_set_sums


def breslow_baseline(
    X: NDArray,
    beta: NDArray,
    risk: RiskSetIndex,
) -> BaselineParams:
    """Compute the Breslow cumulative baseline hazard.

    Parameters
    ----------
    X : NDArray
        (n, p) covariate matrix in original row order.
    beta : NDArray
        (p,) coefficients.
    risk : RiskSetIndex
        Risk-set index for the same observations.

    Returns
    -------
    BaselineParams

    Raises
    ------
    NumericalError
        If an event time has an empty risk set or a zero / non-finite
        risk-set sum.
    """
    empty = risk.n_risk <= 0
    if np.any(empty):
        t_bad = float(risk.event_times[np.argmax(empty)])
        raise NumericalError(
            f"Empty risk set at event time {t_bad:g}",
            time=t_bad,
            coefficients=np.array(beta, copy=True),
        )

    _, eta_max, (S0,) = risk_set_sums(beta, risk.sort(X), risk, order=0)

    bad = ~np.isfinite(S0) | (S0 <= 0)
    if np.any(bad):
        t_bad = float(risk.event_times[np.argmax(bad)])
        raise NumericalError(
            f"Risk-set sum is {S0[np.argmax(bad)]} at event time {t_bad:g} "
            f"for coefficients {np.asarray(beta).tolist()}",
            time=t_bad,
            coefficients=np.array(beta, copy=True),
        )

    # d / (S0 * exp(eta_max)) evaluated in log space
    with np.errstate(over="ignore", under="ignore"):
        increment = np.exp(np.log(risk.n_events) - np.log(S0) - eta_max)

    if not np.all(np.isfinite(increment)):
        t_bad = float(risk.event_times[np.argmax(~np.isfinite(increment))])
        raise NumericalError(
            f"Baseline hazard increment overflows at event time {t_bad:g}; "
            f"the linear predictor is too large to evaluate at x = 0",
            time=t_bad,
            coefficients=np.array(beta, copy=True),
        )

    return BaselineParams(
        time=risk.event_times.copy(),
        cumulative_hazard=np.cumsum(increment),
        hazard_increment=increment,
        n_risk=risk.n_risk.copy(),
        n_events=risk.n_events.copy(),
        coefficients=np.array(beta, dtype=np.float64, copy=True),
    )


def step_cumulative_hazard(
    event_times: NDArray,
    cumulative_hazard: NDArray,
    t,
) -> NDArray:
    """Evaluate the step function H0 at t (scalar or array).

    Uses the last value at or before t; 0 before the first event time.
    """
    t = np.asarray(t, dtype=np.float64)
    idx = np.searchsorted(event_times, t, side="right")
    padded = np.concatenate([[0.0], cumulative_hazard])
    return padded[idx]
