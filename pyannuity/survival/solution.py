"""
Solution wrappers for survival results.

Each Solution wraps a Result[Params] and exposes user-friendly properties
with R-style summary() methods.
"""

from __future__ import annotations

import numpy as np

from pyannuity.core.result import Result
from pyannuity.survival._baseline import step_cumulative_hazard
from pyannuity.survival._common import (
    BaselineParams,
    CoxParams,
    SurvivalCurveParams,
)


class CoxSolution:
    """Fitted Cox proportional hazards model.

    Properties mirror R's coxph() output. Immutable once returned.
    """

    __slots__ = ('_result',)

    def __init__(self, _result: Result[CoxParams]) -> None:
        self._result = _result

    @property
    def coefficients(self):
        return self._result.params.coefficients

    @property
    def covariate_names(self) -> tuple[str, ...]:
        return self._result.params.covariate_names

    @property
    def coefficient_map(self) -> dict[str, float]:
        """Covariate name -> coefficient, in design-matrix order."""
        return {
            name: float(coef)
            for name, coef in zip(self.covariate_names, self.coefficients)
        }

    @property
    def hazard_ratios(self):
        return self._result.params.hazard_ratios

    @property
    def standard_errors(self):
        return self._result.params.standard_errors

    @property
    def z_statistics(self):
        return self._result.params.z_statistics

    @property
    def p_values(self):
        return self._result.params.p_values

    @property
    def covariance(self):
        """Inverse information at the optimum; None unless converged."""
        return self._result.params.covariance

    @property
    def loglik(self):
        return self._result.params.loglik

    @property
    def log_partial_likelihood(self) -> float:
        return self._result.params.loglik[1]

    @property
    def concordance(self) -> float:
        return self._result.params.concordance

    @property
    def n_events(self) -> int:
        return self._result.params.n_events

    @property
    def n_observations(self) -> int:
        return self._result.params.n_observations

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def termination(self) -> str:
        """Why Newton-Raphson stopped (see CoxParams.termination)."""
        return self._result.params.termination

    @property
    def diverging(self) -> tuple[str, ...]:
        return self._result.params.diverging

    @property
    def ties(self) -> str:
        return self._result.params.ties

    @property
    def params(self) -> CoxParams:
        return self._result.params

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    def summary(self) -> str:
        """R-style summary of Cox PH fit."""
        lines = []
        lines.append("Call: coxph()")
        lines.append("")
        lines.append(
            f"  n= {self.n_observations}, "
            f"number of events= {self.n_events}"
        )
        lines.append("")

        lines.append(
            f"  {'':>10s}  {'coef':>10s}  {'exp(coef)':>10s}  "
            f"{'se(coef)':>10s}  {'z':>10s}  {'Pr(>|z|)':>12s}"
        )
        for i, name in enumerate(self.covariate_names):
            lines.append(
                f"  {name:>10s}  {self.coefficients[i]:10.6f}  "
                f"{self.hazard_ratios[i]:10.6f}  "
                f"{self.standard_errors[i]:10.6f}  "
                f"{self.z_statistics[i]:10.4f}  "
                f"{self.p_values[i]:12.4g}"
            )

        lines.append("")
        lines.append(f"  Concordance= {self.concordance:.4f}")
        lr_stat = 2 * (self.loglik[1] - self.loglik[0])
        lines.append(
            f"  Likelihood ratio test= {lr_stat:.4f} on "
            f"{len(self.coefficients)} df"
        )
        status = "converged" if self.converged else f"NOT converged ({self.termination})"
        lines.append(f"  Newton-Raphson {status} in {self.n_iter} iterations")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CoxSolution(n={self.n_observations}, "
            f"events={self.n_events}, "
            f"converged={self.converged})"
        )


class BaselineSolution:
    """Breslow cumulative baseline hazard curve.

    The curve starts at H0 = 0 before the first event time and is a
    non-decreasing step function of time.
    """

    __slots__ = ('_result',)

    def __init__(self, _result: Result[BaselineParams]) -> None:
        self._result = _result

    @property
    def time(self):
        """Distinct event times."""
        return self._result.params.time

    @property
    def cumulative_hazard(self):
        """H0 at each event time."""
        return self._result.params.cumulative_hazard

    @property
    def hazard_increment(self):
        return self._result.params.hazard_increment

    @property
    def survival(self):
        """Baseline survival S0 = exp(-H0) at each event time."""
        return np.exp(-self._result.params.cumulative_hazard)

    @property
    def n_risk(self):
        return self._result.params.n_risk

    @property
    def n_events(self):
        return self._result.params.n_events

    @property
    def coefficients(self):
        return self._result.params.coefficients

    @property
    def points(self) -> list[tuple[float, float]]:
        """(time, cumulative hazard) pairs, starting from (0, 0)."""
        return [(0.0, 0.0)] + [
            (float(t), float(h))
            for t, h in zip(self.time, self.cumulative_hazard)
        ]

    def cumulative_hazard_at(self, t):
        """Step-function H0(t); 0 before the first event time."""
        return step_cumulative_hazard(self.time, self.cumulative_hazard, t)

    def survival_at(self, t):
        """Step-function S0(t); 1 before the first event time."""
        return np.exp(-self.cumulative_hazard_at(t))

    @property
    def params(self) -> BaselineParams:
        return self._result.params

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    def summary(self) -> str:
        """Tabular summary of the baseline hazard."""
        lines = []
        lines.append("Call: baseline_hazard()")
        lines.append("")
        lines.append(
            f"  event times={len(self.time)}, "
            f"H0(max)={self.cumulative_hazard[-1]:.6g}"
        )
        lines.append("")
        lines.append(
            f"  {'time':>8s}  {'n.risk':>8s}  {'n.event':>8s}  "
            f"{'hazard':>10s}  {'cumhaz':>10s}  {'survival':>10s}"
        )

        m = len(self.time)
        show = min(m, 20)
        survival = self.survival
        for i in range(show):
            lines.append(
                f"  {self.time[i]:8.4g}  {self.n_risk[i]:8.0f}  "
                f"{self.n_events[i]:8.0f}  "
                f"{self.hazard_increment[i]:10.6f}  "
                f"{self.cumulative_hazard[i]:10.6f}  "
                f"{survival[i]:10.6f}"
            )
        if m > 20:
            lines.append(f"  ... ({m - 20} more rows)")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BaselineSolution(event_times={len(self.time)}, "
            f"last_time={self.time[-1]:.4g})"
        )


class SurvivalCurveSolution:
    """Projected survival for one cohort covariate vector."""

    __slots__ = ('_result',)

    def __init__(self, _result: Result[SurvivalCurveParams]) -> None:
        self._result = _result

    @property
    def horizon(self):
        """Integer years 1..h."""
        return self._result.params.horizon

    @property
    def survival(self):
        return self._result.params.survival

    @property
    def cumulative_hazard(self):
        return self._result.params.cumulative_hazard

    @property
    def covariates(self):
        return self._result.params.covariates

    @property
    def linear_predictor(self) -> float:
        return self._result.params.linear_predictor

    @property
    def extrapolated(self):
        """True for years beyond the last observed event time."""
        return self._result.params.extrapolated

    @property
    def last_event_time(self) -> float:
        return self._result.params.last_event_time

    @property
    def points(self) -> list[tuple[int, float]]:
        """(year, survival probability) pairs."""
        return [(int(t), float(s)) for t, s in zip(self.horizon, self.survival)]

    @property
    def params(self) -> SurvivalCurveParams:
        return self._result.params

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    def __len__(self) -> int:
        return len(self.horizon)

    def summary(self) -> str:
        lines = []
        lines.append("Call: project()")
        lines.append("")
        lines.append(
            f"  horizon={len(self)}, linear predictor={self.linear_predictor:.6g}"
        )
        lines.append("")
        lines.append(f"  {'year':>6s}  {'survival':>10s}")
        for year, surv, extra in zip(self.horizon, self.survival, self.extrapolated):
            flag = "  *" if extra else ""
            lines.append(f"  {year:6d}  {surv:10.6f}{flag}")
        if np.any(self.extrapolated):
            lines.append("")
            lines.append(
                f"  * beyond last event time {self.last_event_time:.4g}; "
                f"baseline held constant"
            )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SurvivalCurveSolution(horizon={len(self)}, "
            f"S(h)={self.survival[-1]:.4f})"
        )
