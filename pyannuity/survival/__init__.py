"""
Survival modelling.

Public API:
    coxph(observations) -> CoxSolution
    baseline_hazard(fit, observations) -> BaselineSolution
    project(baseline, fit, covariates, horizon) -> SurvivalCurveSolution
"""

from pyannuity.survival.solvers import baseline_hazard, coxph, project
from pyannuity.survival.solution import (
    BaselineSolution,
    CoxSolution,
    SurvivalCurveSolution,
)

__all__ = [
    "coxph",
    "baseline_hazard",
    "project",
    "CoxSolution",
    "BaselineSolution",
    "SurvivalCurveSolution",
]
