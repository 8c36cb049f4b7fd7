"""
Risk-set index shared by the Cox fit and the Breslow estimator.

Subjects are sorted by ascending follow-up time once. The risk set of a
distinct event time t_k is then the contiguous tail of the sorted order
starting at the first subject with time >= t_k, so every risk-set sum
is a reverse cumulative sum read at `start`.

The index depends only on (time, event). Scaling a covariate or
perturbing coefficients leaves it unchanged, so sensitivity refits reuse
it instead of re-sorting.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class RiskSetIndex:
    """Sorted order and event-time grouping for one ObservationSet."""

    order: NDArray               # (n,) permutation sorting time ascending
    time_sorted: NDArray         # (n,)
    event_sorted: NDArray        # (n,)
    event_times: NDArray         # (m,) distinct event times, ascending
    start: NDArray               # (m,) first sorted position with time >= t_k
    n_events: NDArray            # (m,) events tied at t_k
    n_risk: NDArray              # (m,) size of the risk set at t_k

    def sort(self, X: NDArray) -> NDArray:
        """Rows of X in risk-set order."""
        return X[self.order]


def build_risk_sets(time: NDArray, event: NDArray) -> RiskSetIndex:
    """Build the risk-set index for (time, event)."""
    order = np.argsort(time, kind="stable")
    time_sorted = time[order]
    event_sorted = event[order]

    event_times, n_events = np.unique(time[event == 1.0], return_counts=True)
    start = np.searchsorted(time_sorted, event_times, side="left")

    return RiskSetIndex(
        order=order,
        time_sorted=time_sorted,
        event_sorted=event_sorted,
        event_times=event_times,
        start=start,
        n_events=n_events.astype(np.float64),
        n_risk=(len(time) - start).astype(np.float64),
    )


def reverse_cumsum(values: NDArray) -> NDArray:
    """Sum over each tail: out[i] = values[i:].sum(axis=0)."""
    return np.cumsum(values[::-1], axis=0)[::-1]


def risk_set_sums(
    beta: NDArray,
    X_sorted: NDArray,
    risk: RiskSetIndex,
    order: int = 0,
) -> tuple[NDArray, float, tuple[NDArray, ...]]:
    """Risk-set weighted sums of exp(X @ beta) at each distinct event time.

    The linear predictor is centered by its maximum before exponentiation;
    every sum is therefore scaled by exp(-eta_max).

    Parameters
    ----------
    beta : (p,)
    X_sorted : (n, p) in risk-set order
    risk : RiskSetIndex
    order : int
        0 returns S0 only, 1 adds S1, 2 adds S1 and S2.

    Returns
    -------
    (eta_c, eta_max, sums)
        eta_c : (n,) centered linear predictor, sorted
        eta_max : float
        sums : (S0,) or (S0, S1) or (S0, S1, S2) with shapes
            (m,), (m, p), (m, p, p)
    """
    eta = X_sorted @ beta
    eta_max = float(np.max(eta))
    eta_c = eta - eta_max
    w = np.exp(eta_c)

    sums: tuple[NDArray, ...] = (reverse_cumsum(w)[risk.start],)
    if order >= 1:
        wX = X_sorted * w[:, np.newaxis]
        sums += (reverse_cumsum(wX)[risk.start],)
    if order >= 2:
        wXX = wX[:, :, np.newaxis] * X_sorted[:, np.newaxis, :]
        sums += (reverse_cumsum(wXX)[risk.start],)
    return eta_c, eta_max, sums
