"""
Parameter payload for sensitivity reports.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class SensitivityParams:
    """Price metric recorded once per fitted coefficient, in order."""

    covariate_names: tuple[str, ...]
    base_coefficients: NDArray       # (k,) — coefficients of the original fit
    perturbed_coefficients: NDArray  # (k,) — value each entry is reported against
    price_metrics: NDArray           # (k,) — Σ_t S(t) for the cohort; NaN if the refit failed
    converged: NDArray               # (k,) bool — refit (or original fit) converged
    method: str                      # "scale_covariate" or "perturb_coefficient"
    epsilon: float | None            # relative perturbation, perturb_coefficient only
    horizon: int
