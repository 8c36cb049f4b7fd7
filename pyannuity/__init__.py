"""
PyAnnuity: survival-adjusted annuity pricing for Python.

Fits a Cox proportional hazards model to individual follow-up data,
projects covariate-specific survival, and prices a deferred annuity on
the projected curve, with a sensitivity analysis over the fitted
coefficients.

Submodules:
    data: ObservationSet container and the seeded synthetic generator
    survival: Cox PH fit, Breslow baseline hazard, survival projection
    pricing: Annuity present value
    sensitivity: Price sensitivity to the fitted coefficients
    pipeline: End-to-end fit -> baseline -> project -> price run
"""

__version__ = "0.1.0"

from pyannuity import data
from pyannuity import survival
from pyannuity import pricing
from pyannuity import sensitivity
from pyannuity import pipeline

__all__ = [
    "__version__",
    "data",
    "survival",
    "pricing",
    "sensitivity",
    "pipeline",
]
