"""
Price sensitivity to the fitted Cox coefficients.

Two procedures, both walking the coefficients in design-matrix order and
producing one independent entry per coefficient:

scale_covariate
    For coefficient β_k, replace age by age * β_k in the design matrix,
    refit a fresh Cox model, rebuild its Breslow baseline, project the
    same cohort covariate vector (age NOT rescaled) and record
    (β_k, Σ_t S(t)). This conflates sensitivity to β_k with a change of
    units on age; it is kept as the default because it is the established
    behaviour of the pricing tool.

perturb_coefficient
    Set β'_k = β_k * (1 + epsilon) with the other coefficients fixed, rebuild
    the Breslow baseline at β' without refitting, project and record
    (β'_k, Σ_t S(t)).

The risk-set index depends only on (time, event), which neither procedure
changes, so it is built once and shared by every entry.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyannuity.core.exceptions import PyAnnuityError
from pyannuity.data.design import ObservationSet
from pyannuity.survival._baseline import breslow_baseline
from pyannuity.survival._cox import cox_fit
from pyannuity.survival._projection import project_survival
from pyannuity.survival._risk import RiskSetIndex


def scale_covariate_sensitivity(
    observations: ObservationSet,
    beta: NDArray,
    covariates: NDArray,
    horizon: int,
    risk: RiskSetIndex,
    tol: float,
    max_iter: int,
) -> tuple[NDArray, NDArray, NDArray, list[str]]:
    """Refit once per coefficient with age scaled by that coefficient.

    Returns
    -------
    (perturbed, metrics, converged, messages)
    """
    k = len(beta)
    perturbed = np.array(beta, dtype=np.float64, copy=True)
    metrics = np.full(k, np.nan)
    converged = np.zeros(k, dtype=bool)
    messages: list[str] = []

    for idx, beta_k in enumerate(perturbed):
        name = observations.covariate_names[idx]
        altered = observations.with_age_scaled(beta_k)
        X = altered.design_matrix
        try:
            params = cox_fit(
                altered.time, altered.event, X, altered.covariate_names,
                tol=tol, max_iter=max_iter, risk=risk,
            )
            baseline = breslow_baseline(X, params.coefficients, risk)
        except PyAnnuityError as e:
            messages.append(f"{name}: refit with age scaled by {beta_k:.6g} failed: {e}")
            continue

        curve = project_survival(baseline, params.coefficients, covariates, horizon)
        metrics[idx] = float(np.sum(curve.survival))
        converged[idx] = params.converged
        if not params.converged:
            messages.append(
                f"{name}: refit with age scaled by {beta_k:.6g} did not converge "
                f"({params.termination}) in {params.n_iter} iterations"
            )

    return perturbed, metrics, converged, messages


def perturb_coefficient_sensitivity(
    observations: ObservationSet,
    beta: NDArray,
    covariates: NDArray,
    horizon: int,
    risk: RiskSetIndex,
    epsilon: float,
    base_converged: bool,
) -> tuple[NDArray, NDArray, NDArray, list[str]]:
    """Scale one coefficient at a time by (1 + epsilon), no refit."""
    k = len(beta)
    X = observations.design_matrix
    perturbed = np.empty(k, dtype=np.float64)
    metrics = np.full(k, np.nan)
    converged = np.full(k, bool(base_converged))
    messages: list[str] = []

    for idx in range(k):
        beta_p = np.array(beta, dtype=np.float64, copy=True)
        beta_p[idx] *= 1.0 + epsilon
        perturbed[idx] = beta_p[idx]
        try:
            baseline = breslow_baseline(X, beta_p, risk)
        except PyAnnuityError as e:
            messages.append(f"{observations.covariate_names[idx]}: baseline failed: {e}")
            converged[idx] = False
            continue

        curve = project_survival(baseline, beta_p, covariates, horizon)
        metrics[idx] = float(np.sum(curve.survival))

    return perturbed, metrics, converged, messages
