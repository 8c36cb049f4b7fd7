"""
Parameter payloads for survival results.

Each dataclass is a frozen payload carried inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class CoxParams:
    """Cox proportional hazards model parameters (Breslow ties)."""

    coefficients: NDArray        # (p,) — log hazard ratios
    covariate_names: tuple[str, ...]
    hazard_ratios: NDArray       # (p,) — exp(coef)
    standard_errors: NDArray     # (p,) — NaN when covariance is None
    z_statistics: NDArray        # (p,) — coef / se
    p_values: NDArray            # (p,) — two-sided Wald test
    covariance: NDArray | None   # (p, p) — inverse information, converged fits only
    loglik: tuple[float, float]  # (null log-lik, model log-lik)
    concordance: float           # Harrell's C-statistic
    n_events: int
    n_observations: int
    n_iter: int                  # Newton-Raphson iterations
    converged: bool
    termination: str             # "converged", "max_iter", "singular_information"
                                 # or "monotone_likelihood"
    diverging: tuple[str, ...]   # covariates whose coefficient may be infinite
    ties: str                    # always "breslow"


@dataclass(frozen=True)
class BaselineParams:
    """Breslow cumulative baseline hazard at the distinct event times."""

    time: NDArray                # (m,) — distinct event times, strictly increasing
    cumulative_hazard: NDArray   # (m,) — H0(t), non-decreasing
    hazard_increment: NDArray    # (m,) — dH0 at each event time
    n_risk: NDArray              # (m,) — subjects with time >= t
    n_events: NDArray            # (m,) — events at t
    coefficients: NDArray        # (p,) — coefficients the curve was built from


@dataclass(frozen=True)
class SurvivalCurveParams:
    """Individual survival projected at integer horizons 1..h."""

    horizon: NDArray             # (h,) — 1, 2, ..., h
    survival: NDArray            # (h,) — S(t | x), non-increasing
    cumulative_hazard: NDArray   # (h,) — H0(t) * exp(eta)
    covariates: NDArray          # (p,) — cohort covariate vector
    linear_predictor: float      # eta = beta . x
    extrapolated: NDArray        # (h,) bool — t beyond the last event time
    last_event_time: float
