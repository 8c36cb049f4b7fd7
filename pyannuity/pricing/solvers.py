"""
Public API for annuity pricing.

    price_annuity(curve, discount_rate) → AnnuitySolution
"""

from __future__ import annotations

import numpy as np

from pyannuity.core.compute.timing import Timer
from pyannuity.core.exceptions import ValidationError
from pyannuity.core.result import Result
from pyannuity.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_in_range,
    check_integer,
    check_min_samples,
    check_real,
)
from pyannuity.pricing._annuity import annuity_present_value
from pyannuity.pricing.solution import AnnuitySolution
from pyannuity.survival.solution import SurvivalCurveSolution


def price_annuity(
    curve,
    discount_rate: float,
    *,
    deferral: int = 0,
    payment: float = 1.0,
) -> AnnuitySolution:
    """Price a life annuity on a projected survival curve.

    Parameters
    ----------
    curve : SurvivalCurveSolution or array-like
        Survival probabilities at years 1..h.
    discount_rate : float
        Annual effective discount rate, > -1.
    deferral : int
        Years before the first payment, 0 <= deferral < h.
    payment : float
        Payment per surviving year, > 0.

    Returns
    -------
    AnnuitySolution

    Raises
    ------
    ValidationError
        Out-of-range rate, deferral or payment, or probabilities outside
        [0, 1].
    """
    warnings_list: list[str] = []
    if isinstance(curve, SurvivalCurveSolution):
        survival = curve.survival
        warnings_list.extend(curve.warnings)
    else:
        survival = check_array(curve, "curve")
        check_1d(survival, "curve")
        check_min_samples(survival, 1, "curve")
        check_finite(survival, "curve")
        if np.any((survival < 0) | (survival > 1)):
            raise ValidationError("curve: survival probabilities must lie in [0, 1]")

    discount_rate = check_real(discount_rate, "discount_rate")
    check_in_range(discount_rate, -1.0, None, "discount_rate", low_inclusive=False)
    deferral = check_integer(deferral, "deferral")
    check_in_range(deferral, 0, len(survival) - 1, "deferral")
    payment = check_real(payment, "payment")
    check_in_range(payment, 0.0, None, "payment", low_inclusive=False)

    timer = Timer()
    timer.start()

    with timer.section('discounting'):
        params = annuity_present_value(
            survival, discount_rate, deferral=deferral, payment=payment,
        )

    timer.stop()

    result = Result(
        params=params,
        info={
            "method": "Life annuity (arrears)",
            "horizon": len(survival),
            "discount_rate": discount_rate,
            "deferral": deferral,
        },
        timing=timer.result(),
        backend_name="cpu_annuity",
        warnings=tuple(warnings_list),
    )

    return AnnuitySolution(_result=result)
