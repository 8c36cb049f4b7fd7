"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyannuity.data import GeneratorConfig, ObservationSet, generate


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def tied_observations():
    """Four subjects, all events, two tied at t=1; age is the only covariate.

    Hand-computed Breslow fit:
        beta = -log(2), information = 2/3, loglik(0) = -5 log 2
        H0 = [2/3, 4/3, 10/3] at t = [1, 2, 3]
    """
    return ObservationSet.from_arrays(
        age=[0.0, 1.0, 0.0, 1.0],
        time=[1.0, 1.0, 2.0, 3.0],
        event=[1, 1, 1, 1],
    )


@pytest.fixture
def small_synthetic():
    """Seeded 200-subject synthetic set with the standard three covariates."""
    return generate(GeneratorConfig(sample_size=200, seed=7))


@pytest.fixture
def synthetic_observations():
    """Default synthetic set (n=1000, seed=42)."""
    return generate()


@pytest.fixture
def collinear_observations(rng):
    """covariate1 is exactly twice age: singular information matrix."""
    n = 50
    age = rng.normal(50.0, 10.0, size=n)
    time = rng.exponential(10.0, size=n)
    event = np.ones(n)
    return ObservationSet.from_arrays(age, time, event, covariates=2.0 * age)
