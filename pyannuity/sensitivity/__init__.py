"""
Price sensitivity analysis.

Public API:
    analyze(observations, fit, covariates, horizon, *, method=...) -> SensitivitySolution
"""

from pyannuity.sensitivity.solvers import analyze
from pyannuity.sensitivity.solution import SensitivitySolution

__all__ = [
    "analyze",
    "SensitivitySolution",
]
