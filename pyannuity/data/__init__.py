"""
Observation data.

Public API:
    Observation            one subject's record
    ObservationSet         validated, immutable fitting input
    GeneratorConfig        settings for the synthetic generator
    generate(config)       seeded synthetic ObservationSet
"""

from pyannuity.data.design import Observation, ObservationSet
from pyannuity.data.synthetic import COVARIATE_NAMES, GeneratorConfig, generate

__all__ = [
    "Observation",
    "ObservationSet",
    "GeneratorConfig",
    "generate",
    "COVARIATE_NAMES",
]
