"""
Diagnostic test solution types.

Each solution wraps a Result[...Params] and provides olsrr-style text
output via summary().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyolsbuild.core.result import Result
from pyolsbuild.diagnostics._common import (
    CorrelationParams,
    HeteroskedasticityParams,
    NormalityParams,
    NormalityRow,
)


@dataclass
class HeteroskedasticitySolution:
    """
    User-facing Breusch-Pagan / score test results.

    ``statistic``, ``df`` and ``p_value`` refer to the joint test (the
    only test unless ``multiple`` was requested).
    """
    _result: Result[HeteroskedasticityParams]

    @property
    def method(self) -> str:
        return self._result.params.method

    @property
    def statistic(self) -> float:
        return self._result.params.statistics[-1]

    @property
    def df(self) -> int:
        return self._result.params.df[-1]

    @property
    def p_value(self) -> float:
        return self._result.params.p_values[-1]

    @property
    def statistics(self) -> dict[str, float]:
        """Every statistic by label."""
        p = self._result.params
        return dict(zip(p.labels, p.statistics))

    @property
    def p_values(self) -> dict[str, float]:
        """Every (adjusted) p-value by label."""
        p = self._result.params
        return dict(zip(p.labels, p.p_values))

    @property
    def variables(self) -> tuple[str, ...]:
        return self._result.params.variables

    @property
    def multiple(self) -> bool:
        return self._result.params.multiple

    @property
    def p_adjust(self) -> str:
        return self._result.params.p_adjust

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        p = self._result.params
        lines = [
            "",
            f" {p.method}",
            " " + "-" * len(p.method),
            " Ho: the variance is constant",
            " Ha: the variance is not constant",
            "",
            f" Variables: {' '.join(p.variables)}",
            "",
        ]

        if p.multiple:
            lines.append(f" {'Variable':<14} {'chi2':>10} {'df':>4} {'p':>10}")
            lines.append(" " + "-" * 41)
            for label, stat, df, pv in zip(p.labels, p.statistics, p.df, p.p_values):
                lines.append(f" {label:<14} {stat:10.4f} {df:4d} {pv:10.4f}")
            lines.append(" " + "-" * 41)
            lines.append(f" p-value adjustment: {p.p_adjust}")
        else:
            lines.append("        Test Summary")
            lines.append(" " + "-" * 28)
            lines.append(f" DF            =    {self.df}")
            lines.append(f" Chi2          =    {self.statistic:.7g}")
            lines.append(f" Prob > Chi2   =    {self.p_value:.7g}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"HeteroskedasticitySolution(method={self.method!r}, "
            f"statistic={self.statistic:.4f}, df={self.df}, "
            f"p_value={self.p_value:.4g})"
        )


@dataclass
class NormalitySolution:
    """Residual normality test battery."""
    _result: Result[NormalityParams]

    @property
    def rows(self) -> tuple[NormalityRow, ...]:
        return self._result.params.rows

    def __getitem__(self, test: str) -> NormalityRow:
        for row in self._result.params.rows:
            if row.test == test:
                return row
        names = [r.test for r in self._result.params.rows]
        raise KeyError(f"No test {test!r}. Available: {names}")

    @property
    def n(self) -> int:
        return self._result.params.n

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        lines = [
            "-" * 52,
            f"{'Test':<24} {'Statistic':>12} {'pvalue':>12}",
            "-" * 52,
        ]
        for row in self.rows:
            lines.append(f"{row.test:<24} {row.statistic:12.4f} {row.p_value:12.4f}")
        lines.append("-" * 52)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"NormalitySolution(n={self.n}, tests={[r.test for r in self.rows]})"


@dataclass
class CorrelationSolution:
    """Zero-order, partial and part correlations per predictor."""
    _result: Result[CorrelationParams]

    @property
    def predictors(self) -> tuple[str, ...]:
        return self._result.params.predictors

    @property
    def zero_order(self) -> NDArray[np.floating[Any]]:
        return self._result.params.zero_order

    @property
    def partial(self) -> NDArray[np.floating[Any]]:
        return self._result.params.partial

    @property
    def part(self) -> NDArray[np.floating[Any]]:
        return self._result.params.part

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def to_dataframe(self):
        """Correlations as a pandas DataFrame indexed by predictor."""
        import pandas as pd

        return pd.DataFrame(
            {'Zero-order': self.zero_order, 'Partial': self.partial, 'Part': self.part},
            index=list(self.predictors),
        )

    def summary(self) -> str:
        lines = [
            "Correlations",
            "-" * 48,
            f"{'Variable':<14} {'Zero Order':>10} {'Partial':>10} {'Part':>10}",
            "-" * 48,
        ]
        for name, z, pa, pt in zip(self.predictors, self.zero_order, self.partial, self.part):
            lines.append(f"{name:<14} {z:10.3f} {pa:10.3f} {pt:10.3f}")
        lines.append("-" * 48)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"CorrelationSolution(predictors={list(self.predictors)})"
