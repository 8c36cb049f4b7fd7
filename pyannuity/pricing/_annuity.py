"""
Deferred life annuity present value.

A unit payment is made at the end of each year t the annuitant survives,
starting after `deferral` years:

    PV(t) = payment * S(t) * v**t    for t > deferral, else 0
    v     = 1 / (1 + r)
    total = Σ_t PV(t)

With deferral = 0 this is the temporary immediate annuity a_{x:h}.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyannuity.pricing._common import AnnuityParams


def annuity_present_value(
    survival: NDArray,
    discount_rate: float,
    deferral: int = 0,
    payment: float = 1.0,
) -> AnnuityParams:
    """Discount a yearly survival curve into an annuity quote.

    Parameters
    ----------
    survival : NDArray
        (h,) survival probabilities at years 1..h.
    discount_rate : float
        Annual effective rate r > -1.
    deferral : int
        Number of initial years without payment.
    payment : float
        Payment per surviving year.
    """
    h = len(survival)
    years = np.arange(1, h + 1)
    discount_factors = (1.0 + discount_rate) ** -years.astype(np.float64)

    present_values = payment * survival * discount_factors
    present_values = np.where(years > deferral, present_values, 0.0)

    return AnnuityParams(
        years=years,
        survival=np.array(survival, dtype=np.float64, copy=True),
        discount_factors=discount_factors,
        present_values=present_values,
        total_present_value=float(np.sum(present_values)),
        discount_rate=float(discount_rate),
        deferral=int(deferral),
        payment=float(payment),
    )
