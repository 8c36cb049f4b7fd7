"""
Seeded synthetic observation generator.

Stands in for an external data source so the pricing pipeline can be run
end to end. Each call builds its own np.random.default_rng(seed); global
NumPy random state is never read or written, so runs are independently
reproducible.

Draw order (fixed, part of the reproducibility contract):
    age        ~ Normal(age_mean, age_sd)
    time       ~ Exponential(rate=survival_rate)
    event      ~ Bernoulli(event_probability)
    covariate1 ~ Normal(covariate1_mean, covariate1_sd)
    covariate2 ~ Bernoulli(covariate2_probability)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pyannuity.core.validation import (
    check_in_range,
    check_integer,
    check_real,
)
from pyannuity.data.design import ObservationSet


COVARIATE_NAMES = ("age", "covariate1", "covariate2")


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for `generate`. Validated at construction."""

    sample_size: int = 1000
    age_mean: float = 50.0
    age_sd: float = 10.0
    survival_rate: float = 0.1
    event_probability: float = 0.7
    covariate1_mean: float = 0.0
    covariate1_sd: float = 1.0
    covariate2_probability: float = 0.5
    seed: int = 42

    def __post_init__(self) -> None:
        check_in_range(check_integer(self.sample_size, "sample_size"), 1, None, "sample_size")
        check_real(self.age_mean, "age_mean")
        check_in_range(check_real(self.age_sd, "age_sd"), 0.0, None, "age_sd")
        check_in_range(
            check_real(self.survival_rate, "survival_rate"), 0.0, None,
            "survival_rate", low_inclusive=False,
        )
        check_in_range(
            check_real(self.event_probability, "event_probability"), 0.0, 1.0,
            "event_probability",
        )
        check_real(self.covariate1_mean, "covariate1_mean")
        check_in_range(check_real(self.covariate1_sd, "covariate1_sd"), 0.0, None, "covariate1_sd")
        check_in_range(
            check_real(self.covariate2_probability, "covariate2_probability"), 0.0, 1.0,
            "covariate2_probability",
        )
        check_integer(self.seed, "seed")


def generate(config: GeneratorConfig | None = None) -> ObservationSet:
    """Draw a synthetic ObservationSet.

    Parameters
    ----------
    config : GeneratorConfig or None
        Generator settings. None uses the defaults (n=1000, seed=42).

    Returns
    -------
    ObservationSet
        Covariates named ("age", "covariate1", "covariate2").

    Raises
    ------
    ValidationError
        If the draw contains no events (possible only for tiny samples or
        event_probability near 0).
    """
    if config is None:
        config = GeneratorConfig()

    rng = np.random.default_rng(config.seed)
    n = config.sample_size

    age = rng.normal(config.age_mean, config.age_sd, size=n)
    time = rng.exponential(1.0 / config.survival_rate, size=n)
    event = rng.binomial(1, config.event_probability, size=n)
    covariate1 = rng.normal(config.covariate1_mean, config.covariate1_sd, size=n)
    covariate2 = rng.binomial(1, config.covariate2_probability, size=n)

    # Exponential draws of exactly 0.0 are possible in floating point
    time = np.maximum(time, np.finfo(np.float64).tiny)

    return ObservationSet.from_arrays(
        age=age,
        time=time,
        event=event,
        covariates=np.column_stack([covariate1, covariate2]),
        covariate_names=COVARIATE_NAMES,
    )
