"""
Parameter payloads for pricing results.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class AnnuityParams:
    """Present value of a life-contingent annuity, payable in arrears."""

    years: NDArray               # (h,) — 1..h
    survival: NDArray            # (h,) — S(t) used for each payment
    discount_factors: NDArray    # (h,) — (1 + r) ** -t
    present_values: NDArray      # (h,) — payment * S(t) * v**t, 0 while deferred
    total_present_value: float
    discount_rate: float
    deferral: int                # years with no payment
    payment: float
