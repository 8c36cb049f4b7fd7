"""
Solution wrapper for annuity quotes.
"""

from __future__ import annotations

from pyannuity.core.result import Result
from pyannuity.pricing._common import AnnuityParams


class AnnuitySolution:
    """Annuity quote: yearly present values and their total."""

    __slots__ = ('_result',)

    def __init__(self, _result: Result[AnnuityParams]) -> None:
        self._result = _result

    @property
    def years(self):
        return self._result.params.years

    @property
    def survival(self):
        return self._result.params.survival

    @property
    def discount_factors(self):
        return self._result.params.discount_factors

    @property
    def present_values(self):
        return self._result.params.present_values

    @property
    def yearly_values(self) -> list[tuple[int, float]]:
        """(year, present value) pairs for tabular display."""
        return [
            (int(year), float(pv))
            for year, pv in zip(self.years, self.present_values)
        ]

    @property
    def total_present_value(self) -> float:
        return self._result.params.total_present_value

    @property
    def discount_rate(self) -> float:
        return self._result.params.discount_rate

    @property
    def deferral(self) -> int:
        return self._result.params.deferral

    @property
    def payment(self) -> float:
        return self._result.params.payment

    @property
    def params(self) -> AnnuityParams:
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
        """Tabular summary of the quote."""
        lines = []
        lines.append("Call: price_annuity()")
        lines.append("")
        lines.append(
            f"  discount rate={self.discount_rate:.4%}, "
            f"deferral={self.deferral}, payment={self.payment:g}"
        )
        lines.append("")
        lines.append(
            f"  {'year':>6s}  {'survival':>10s}  {'discount':>10s}  {'PV':>10s}"
        )
        for i, year in enumerate(self.years):
            lines.append(
                f"  {year:6d}  {self.survival[i]:10.6f}  "
                f"{self.discount_factors[i]:10.6f}  "
                f"{self.present_values[i]:10.6f}"
            )
        lines.append("")
        lines.append(f"  Total present value= {self.total_present_value:.6f}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"AnnuitySolution(years={len(self.years)}, "
            f"rate={self.discount_rate:g}, "
            f"total={self.total_present_value:.6f})"
        )
