"""
Solution wrapper for sensitivity reports.
"""

from __future__ import annotations

from pyannuity.core.result import Result
from pyannuity.sensitivity._common import SensitivityParams


class SensitivitySolution:
    """Price metric against each (perturbed) fitted coefficient."""

    __slots__ = ('_result',)

    def __init__(self, _result: Result[SensitivityParams]) -> None:
        self._result = _result

    @property
    def covariate_names(self) -> tuple[str, ...]:
        return self._result.params.covariate_names

    @property
    def base_coefficients(self):
        return self._result.params.base_coefficients

    @property
    def perturbed_coefficients(self):
        return self._result.params.perturbed_coefficients

    @property
    def price_metrics(self):
        return self._result.params.price_metrics

    @property
    def converged(self):
        return self._result.params.converged

    @property
    def method(self) -> str:
        return self._result.params.method

    @property
    def epsilon(self) -> float | None:
        return self._result.params.epsilon

    @property
    def horizon(self) -> int:
        return self._result.params.horizon

    @property
    def entries(self) -> list[tuple[float, float]]:
        """(perturbed coefficient, price metric) pairs, in coefficient order."""
        return [
            (float(c), float(m))
            for c, m in zip(self.perturbed_coefficients, self.price_metrics)
        ]

    @property
    def params(self) -> SensitivityParams:
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
        return len(self.perturbed_coefficients)

    def summary(self) -> str:
        lines = []
        lines.append(f"Call: analyze(method='{self.method}')")
        lines.append("")
        lines.append(
            f"  {'':>12s}  {'coef':>10s}  {'perturbed':>10s}  "
            f"{'metric':>10s}  {'converged':>9s}"
        )
        for i, name in enumerate(self.covariate_names):
            lines.append(
                f"  {name:>12s}  {self.base_coefficients[i]:10.6f}  "
                f"{self.perturbed_coefficients[i]:10.6f}  "
                f"{self.price_metrics[i]:10.6f}  "
                f"{str(bool(self.converged[i])):>9s}"
            )
        lines.append("")
        lines.append(f"  metric = sum of projected survival over {self.horizon} years")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SensitivitySolution(method='{self.method}', "
            f"entries={len(self)})"
        )
