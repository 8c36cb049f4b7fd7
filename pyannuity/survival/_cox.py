"""
Cox Proportional Hazards model via Newton-Raphson, Breslow ties.

Algorithm:
    Initialize β = init (zeros by default)
    For iteration 1..max_iter:
        Compute: partial log-likelihood L(β), score U(β), information I(β)
        step = I(β)^{-1} @ U(β), capped and halved until L does not decrease
        β_new = β + step
        Check convergence: |L(β_new) - L(β)| / (|L(β)| + 0.1) < tol

Breslow's partial likelihood:
    L(β) = Σ_{j: event times} [ Σ_{i ∈ D_j} x_i @ β
            - d_j * log(Σ_{l ∈ R_j} exp(x_l @ β)) ]

    where D_j = set of events at time t_j, d_j = |D_j|,
          R_j = risk set at time t_j (all subjects with time >= t_j).

Risk-set sums are reverse cumulative sums over the time-sorted data
(see _risk.py), so one iteration costs O(n p^2) instead of O(n m p^2).

References:
    Cox, D. R. (1972). Regression models and life-tables. JRSS-B, 34(2), 187-220.
    Breslow, N. (1974). Covariance analysis of censored survival data.
        Biometrics, 30(1), 89-99.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyannuity.core.exceptions import SingularMatrixError
from pyannuity.survival._common import CoxParams
from pyannuity.survival._risk import RiskSetIndex, build_risk_sets, risk_set_sums

# Overflow guard on exp(X @ beta): no coefficient moves more than this per step
MAX_STEP = 5.0
MAX_HALVINGS = 10
# Reciprocal condition number below which the information matrix is singular
RCOND_SINGULAR = 1e-13


def cox_fit(
    time: NDArray,
    event: NDArray,
    X: NDArray,
    covariate_names: tuple[str, ...],
    init: NDArray | None = None,
    tol: float = 1e-8,
    max_iter: int = 50,
    risk: RiskSetIndex | None = None,
) -> CoxParams:
    """Fit Cox proportional hazards model.

    Parameters
    ----------
    time : NDArray
        (n,) follow-up time.
    event : NDArray
        (n,) event indicator (1=event, 0=censored).
    X : NDArray
        (n, p) covariate matrix (NO intercept).
    covariate_names : tuple of str
        Names of the p columns.
    init : NDArray or None
        (p,) starting coefficients. None means zeros.
    tol : float
        Relative log-likelihood convergence tolerance.
    max_iter : int
        Maximum Newton-Raphson iterations.
    risk : RiskSetIndex or None
        Prebuilt index for (time, event); built here when None.

    Returns
    -------
    CoxParams

    Returns CoxParams with converged=False when the run stops on the
    iteration cap, on an information matrix that turns singular, or on a
    coefficient that keeps drifting under a flat likelihood; the reason is
    recorded in CoxParams.termination.

    Raises
    ------
    SingularMatrixError
        If the information matrix is singular at the starting point.
    """
    n, p = X.shape
    if risk is None:
        risk = build_risk_sets(time, event)
    X_sorted = risk.sort(X)
    event_sorted = risk.event_sorted
    d = risk.n_events

    beta = np.zeros(p, dtype=np.float64) if init is None else np.array(init, dtype=np.float64)

    constant = np.flatnonzero(np.ptp(X, axis=0) == 0)
    if len(constant) > 0:
        names = [covariate_names[j] for j in constant]
        raise SingularMatrixError(
            f"Information matrix is singular: covariates {names} are constant",
            matrix_name="information",
            condition_number=float("inf"),
            coefficients=beta.copy(),
        )

    null_loglik = _partial_loglik(np.zeros(p), X_sorted, event_sorted, risk)

    loglik, score, info_matrix = _score_and_information(beta, X_sorted, event_sorted, risk)
    try:
        step = _newton_step(info_matrix, score)
    except np.linalg.LinAlgError as e:
        raise SingularMatrixError(
            f"Information matrix is singular at the initial coefficients {beta.tolist()}; "
            f"check for constant or collinear covariates",
            matrix_name="information",
            condition_number=_condition_number(info_matrix),
            coefficients=beta.copy(),
        ) from e

    converged = False
    termination = "max_iter"
    n_iter = 0
    last_step = np.zeros(p)

    for iteration in range(1, max_iter + 1):
        n_iter = iteration

        # Limit step size so exp(X @ beta) doesn't overflow
        max_abs = np.max(np.abs(step)) if p > 0 else 0.0
        if max_abs > MAX_STEP:
            step = step * (MAX_STEP / max_abs)

        beta_new = beta + step
        loglik_new = _partial_loglik(beta_new, X_sorted, event_sorted, risk)

        # Step-halving while the likelihood gets worse
        halvings = 0
        while (not np.isfinite(loglik_new) or loglik_new < loglik) and halvings < MAX_HALVINGS:
            step = step / 2.0
            beta_new = beta + step
            loglik_new = _partial_loglik(beta_new, X_sorted, event_sorted, risk)
            halvings += 1

        if not np.isfinite(loglik_new) or loglik_new < loglik:
            # No ascent along the Newton direction: already at the optimum
            converged = True
            termination = "converged"
            break

        change = abs(loglik_new - loglik) / (abs(loglik) + 0.1)
        last_step = beta_new - beta
        beta = beta_new
        loglik, score, info_matrix = _score_and_information(beta, X_sorted, event_sorted, risk)

        if change < tol:
            converged = True
            termination = "converged"
            break

        try:
            step = _newton_step(info_matrix, score)
        except np.linalg.LinAlgError:
            # Singular information mid-run: report the last iterate
            termination = "singular_information"
            break

    diverging: tuple[str, ...] = ()
    if converged:
        diverging = _diverging_coefficients(
            beta, last_step, info_matrix, score, covariate_names, tol,
        )
        if diverging:
            converged = False
            termination = "monotone_likelihood"

    covariance = None
    if converged:
        try:
            covariance = np.linalg.inv(info_matrix)
        except np.linalg.LinAlgError:
            covariance = None

    if covariance is not None:
        se = np.sqrt(np.maximum(np.diag(covariance), 0.0))
        with np.errstate(divide="ignore", invalid="ignore"):
            z = np.where(se > 0, beta / se, 0.0)
        p_values = 2.0 * stats.norm.sf(np.abs(z))
    else:
        se = np.full(p, np.nan)
        z = np.full(p, np.nan)
        p_values = np.full(p, np.nan)

    return CoxParams(
        coefficients=beta,
        covariate_names=tuple(covariate_names),
        hazard_ratios=np.exp(beta),
        standard_errors=se,
        z_statistics=z,
        p_values=p_values,
        covariance=covariance,
        loglik=(float(null_loglik), float(loglik)),
        concordance=_concordance(X @ beta, time, event),
        n_events=int(np.sum(d)),
        n_observations=n,
        n_iter=n_iter,
        converged=converged,
        termination=termination,
        diverging=diverging,
        ties="breslow",
    )


def _newton_step(info_matrix: NDArray, score: NDArray) -> NDArray:
    """Solve I @ step = U, treating a numerically singular I as singular."""
    if not np.all(np.isfinite(info_matrix)):
        raise np.linalg.LinAlgError("Information matrix has non-finite entries")
    if info_matrix.size and 1.0 / _condition_number(info_matrix) < RCOND_SINGULAR:
        raise np.linalg.LinAlgError("Information matrix is numerically singular")
    return np.linalg.solve(info_matrix, score)


def _diverging_coefficients(
    beta: NDArray,
    last_step: NDArray,
    info_matrix: NDArray,
    score: NDArray,
    covariate_names: tuple[str, ...],
    tol: float,
) -> tuple[str, ...]:
    """Names of coefficients drifting towards infinity at a stopped fit.

    Under monotone likelihood (a covariate that perfectly orders the
    deaths) the log-likelihood flattens out while the Newton step does not
    shrink: the remaining step is about as large as the last one taken.
    At a genuine optimum the remaining step is quadratically small.
    """
    try:
        remaining = np.abs(_newton_step(info_matrix, score))
    except np.linalg.LinAlgError:
        return ()
    drifting = (
        (remaining > 0.5 * np.abs(last_step))
        & (remaining > np.sqrt(tol) * (1.0 + np.abs(beta)))
    )
    return tuple(covariate_names[j] for j in np.flatnonzero(drifting))


def _condition_number(matrix: NDArray) -> float:
    if matrix.size == 0 or not np.all(np.isfinite(matrix)):
        return float("inf")
    return float(np.linalg.cond(matrix))


def _partial_loglik(
    beta: NDArray,
    X_sorted: NDArray,
    event_sorted: NDArray,
    risk: RiskSetIndex,
) -> float:
    """Breslow partial log-likelihood.

    The centering constant cancels: the event term gains d * eta_max and
    each log risk sum gains eta_max, so centered values give L exactly.
    """
    eta_c, _, (S0,) = risk_set_sums(beta, X_sorted, risk, order=0)
    with np.errstate(divide="ignore"):
        return float(event_sorted @ eta_c - risk.n_events @ np.log(S0))


def _score_and_information(
    beta: NDArray,
    X_sorted: NDArray,
    event_sorted: NDArray,
    risk: RiskSetIndex,
) -> tuple[float, NDArray, NDArray]:
    """Compute log-likelihood, score vector, and observed information matrix.

    Returns
    -------
    (loglik, score, info_matrix)
        loglik : float
        score : (p,) — gradient of log-likelihood
        info_matrix : (p, p) — negative Hessian (observed information)
    """
    eta_c, _, (S0, S1, S2) = risk_set_sums(beta, X_sorted, risk, order=2)
    d = risk.n_events

    # Late risk sets underflow to S0 = 0 far from the optimum; the
    # resulting non-finite entries are caught by _newton_step
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        mean = S1 / S0[:, np.newaxis]                    # (m, p)
        loglik = float(event_sorted @ eta_c - d @ np.log(S0))
        score = event_sorted @ X_sorted - d @ mean
        info_matrix = (
            np.einsum("k,kij->ij", d / S0, S2)
            - np.einsum("k,ki,kj->ij", d, mean, mean)
        )
    return loglik, score, info_matrix


def _concordance(
    eta: NDArray,
    time: NDArray,
    event: NDArray,
) -> float:
    """Harrell's concordance statistic (C-statistic).

    C = P(risk_i > risk_j | T_i < T_j, event_i = 1)
    """
    concordant = 0
    discordant = 0
    tied_risk = 0

    for i in np.flatnonzero(event == 1.0):
        # Subjects still at risk after subject i's event
        later = eta[time > time[i]]
        concordant += int(np.sum(eta[i] > later))
        discordant += int(np.sum(eta[i] < later))
        tied_risk += int(np.sum(eta[i] == later))

    total = concordant + discordant + tied_risk
    if total == 0:
        return 0.5

    return (concordant + 0.5 * tied_risk) / total
