"""
Annuity pricing.

Public API:
    price_annuity(curve, discount_rate, *, deferral=0, payment=1.0) -> AnnuitySolution
"""

from pyannuity.pricing.solvers import price_annuity
from pyannuity.pricing.solution import AnnuitySolution

__all__ = [
    "price_annuity",
    "AnnuitySolution",
]
