"""
ObservationSet: immutable container for individual follow-up data.

Wraps age, follow-up time, event indicator and additional covariates.
Validates inputs at construction time — all downstream code trusts clean
data. The Cox design matrix is always [age | covariates], so age is the
first fitted coefficient.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from pyannuity.core.exceptions import DimensionError, ValidationError
from pyannuity.core.validation import (
    check_2d,
    check_array,
    check_binary,
    check_consistent_length,
    check_finite,
    check_min_samples,
)


@dataclass(frozen=True)
class Observation:
    """One individual's record.

    Parameters
    ----------
    age : float
        Age at entry.
    follow_up_time : float
        Time to event or censoring. Must be > 0.
    event_occurred : bool
        True if the event was observed, False if censored.
    covariates : tuple of float
        Additional covariates, same length for every observation in a set.
    """

    age: float
    follow_up_time: float
    event_occurred: bool
    covariates: tuple[float, ...] = ()


@dataclass(frozen=True)
class ObservationSet:
    """Immutable, validated observation set.

    The arrays are read-only copies of the inputs.

    Parameters
    ----------
    age : NDArray
        (n,) ages.
    time : NDArray
        (n,) follow-up times, strictly positive.
    event : NDArray
        (n,) event indicator: 1 = event observed, 0 = censored.
    covariates : NDArray
        (n, q) additional covariates (q may be 0).
    covariate_names : tuple of str
        q + 1 names, the first one for age.
    """

    age: NDArray
    time: NDArray
    event: NDArray
    covariates: NDArray
    covariate_names: tuple[str, ...]

    @classmethod
    def from_arrays(
        cls,
        age,
        time,
        event,
        covariates=None,
        *,
        covariate_names: Sequence[str] | None = None,
    ) -> ObservationSet:
        """Create and validate an observation set from column arrays.

        Parameters
        ----------
        age : array-like
            Age of each subject.
        time : array-like
            Follow-up time (> 0).
        event : array-like
            Event indicator (0/1 or bool).
        covariates : array-like or None
            (n,) or (n, q) additional covariates. None means no covariates
            beyond age.
        covariate_names : sequence of str or None
            Names for [age, covariates...]. Defaults to
            ("age", "covariate1", ..., "covariateq").

        Returns
        -------
        ObservationSet

        Raises
        ------
        ValidationError
            If the set is empty, has no events, or holds invalid values.
        DimensionError
            If column lengths or covariate widths are inconsistent.
        """
        age = check_array(age, "age").ravel()
        time = check_array(time, "time").ravel()
        event = check_array(event, "event").ravel()

        check_min_samples(time, 1, "time")
        check_consistent_length(age, time, event, names=("age", "time", "event"))

        n = time.shape[0]
        if covariates is None:
            cov = np.empty((n, 0), dtype=np.float64)
        else:
            cov = check_array(covariates, "covariates")
            if cov.ndim == 1:
                cov = cov.reshape(-1, 1)
            check_2d(cov, "covariates")
            check_consistent_length(time, cov, names=("time", "covariates"))

        for arr, name in ((age, "age"), (time, "time"), (event, "event"), (cov, "covariates")):
            check_finite(arr, name)

        if np.any(time <= 0):
            n_bad = int(np.sum(time <= 0))
            raise ValidationError(
                f"time: follow-up times must be > 0, got {n_bad} non-positive values"
            )

        check_binary(event, "event")
        if not np.any(event == 1.0):
            raise ValidationError(
                "event: at least one event is required, got none "
                "(the partial likelihood is degenerate)"
            )

        q = cov.shape[1]
        if covariate_names is None:
            names = ("age",) + tuple(f"covariate{i + 1}" for i in range(q))
        else:
            names = tuple(str(name) for name in covariate_names)
            if len(names) != q + 1:
                raise DimensionError(
                    f"covariate_names: expected {q + 1} names (age + {q} covariates), "
                    f"got {len(names)}"
                )

        # check_array returned copies; derived sets share them read-only
        for arr in (age, time, event, cov):
            arr.flags.writeable = False

        return cls(age=age, time=time, event=event, covariates=cov, covariate_names=names)

    @classmethod
    def from_observations(
        cls,
        observations: Iterable[Observation],
        *,
        covariate_names: Sequence[str] | None = None,
    ) -> ObservationSet:
        """Create an observation set from Observation records.

        Raises
        ------
        DimensionError
            If observations carry covariate tuples of different lengths.
        """
        records = list(observations)
        if not records:
            raise ValidationError("observations: requires at least 1 samples, got 0")

        widths = {len(r.covariates) for r in records}
        if len(widths) > 1:
            raise DimensionError(
                f"covariates: all observations must have the same number of "
                f"covariates, got lengths {sorted(widths)}"
            )
        q = widths.pop()

        return cls.from_arrays(
            age=[r.age for r in records],
            time=[r.follow_up_time for r in records],
            event=[bool(r.event_occurred) for r in records],
            covariates=np.array([r.covariates for r in records], dtype=np.float64).reshape(len(records), q),
            covariate_names=covariate_names,
        )

    @property
    def design_matrix(self) -> NDArray:
        """(n, p) Cox design matrix: [age | covariates]."""
        return np.column_stack([self.age, self.covariates])

    def with_age_scaled(self, factor: float) -> ObservationSet:
        """Return a new set with the age column multiplied by `factor`.

        The time, event and covariate arrays are shared with this set.
        """
        age = self.age * float(factor)
        age.flags.writeable = False
        return ObservationSet(
            age=age,
            time=self.time,
            event=self.event,
            covariates=self.covariates,
            covariate_names=self.covariate_names,
        )

    def __iter__(self):
        for i in range(self.n):
            yield Observation(
                age=float(self.age[i]),
                follow_up_time=float(self.time[i]),
                event_occurred=bool(self.event[i] == 1.0),
                covariates=tuple(float(v) for v in self.covariates[i]),
            )

    def __len__(self) -> int:
        return self.n

    @property
    def n(self) -> int:
        """Number of observations."""
        return len(self.time)

    @property
    def p(self) -> int:
        """Number of Cox covariates including age."""
        return self.covariates.shape[1] + 1

    @property
    def n_events(self) -> int:
        """Number of observed events."""
        return int(np.sum(self.event))
