"""
Selection solution types.

SelectionSolution wraps Result[SelectionParams] (stepwise runs);
SubsetSolution wraps Result[SubsetParams] (all-possible and best-subset
enumeration). Both satisfy the Reportable protocol. Nothing here computes
new statistics; the engines already did.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np

from pyolsbuild.core.result import Result
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._candidate import CandidateResult
from pyolsbuild.selection._common import (
    SearchState,
    SelectionParams,
    StepRecord,
    SubsetParams,
    SubsetRow,
    VALID_METRICS,
)
from pyolsbuild.selection._constraints import ConstraintSet

if TYPE_CHECKING:
    from pyolsbuild.selection.design import SelectionDesign


def _fmt(value: float, width: int, digits: int = 4) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return f"{'NA':>{width}}"
    return f"{value:{width}.{digits}f}"


@dataclass
class SelectionSolution:
    """
    User-facing stepwise selection results.

    An empty step log is a valid outcome (``no_change``): nothing passed
    the entry or removal test and the initial model is the final one.
    """
    _result: Result[SelectionParams]
    _design: 'SelectionDesign'

    # --- Final model ---

    @property
    def final(self) -> CandidateResult:
        return self._result.params.model

    @property
    def model(self) -> LinearSolution:
        """Fitted final model."""
        return self._result.params.model.model

    @property
    def predictors(self) -> tuple[str, ...]:
        """Final predictor set, in order of entry."""
        return self._result.params.model.predictors

    @property
    def initial_predictors(self) -> tuple[str, ...]:
        return self._result.params.initial.predictors

    @property
    def r_squared(self) -> float:
        return self.final.r_squared

    @property
    def adj_r_squared(self) -> float:
        return self.final.adj_r_squared

    @property
    def rmse(self) -> float:
        return self.final.rmse

    # --- Step log ---

    @property
    def steps(self) -> tuple[StepRecord, ...]:
        return self._result.params.steps

    @property
    def metrics(self) -> tuple[StepRecord, ...]:
        """Alias of ``steps``."""
        return self._result.params.steps

    @property
    def n_steps(self) -> int:
        return len(self._result.params.steps)

    @property
    def no_change(self) -> bool:
        return not self._result.params.steps

    @property
    def entered(self) -> tuple[str, ...]:
        return tuple(s.variable for s in self.steps if s.action == 'enter')

    @property
    def removed(self) -> tuple[str, ...]:
        return tuple(s.variable for s in self.steps if s.action == 'remove')

    @property
    def criterion_trajectory(self) -> tuple[float, ...]:
        return tuple(s.criterion_value for s in self.steps)

    # --- Configuration ---

    @property
    def direction(self) -> str:
        return self._result.params.direction

    @property
    def criterion(self) -> str:
        return self._result.params.criterion

    @property
    def constraints(self) -> ConstraintSet:
        return self._result.params.constraints

    @property
    def entry_alpha(self) -> float | None:
        return self._result.params.entry_alpha

    @property
    def removal_alpha(self) -> float | None:
        return self._result.params.removal_alpha

    @property
    def hierarchical(self) -> bool:
        return self._result.params.hierarchical

    @property
    def state(self) -> SearchState:
        return SearchState(self._result.info['state'])

    # --- Metadata ---

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

    # --- Reportable ---

    def plot_data(self) -> dict[str, Any]:
        """Per-step series for plotting the selection path."""
        steps = self.steps
        return {
            'step': np.array([s.step for s in steps], dtype=int),
            'variable': [s.variable for s in steps],
            'action': [s.action for s in steps],
            'criterion': np.array([s.criterion_value for s in steps], dtype=float),
            'p_value': np.array([s.p_value for s in steps], dtype=float),
            'r2': np.array([s.r2 for s in steps], dtype=float),
            'adj_r2': np.array([s.adj_r2 for s in steps], dtype=float),
            'aic': np.array([s.aic for s in steps], dtype=float),
            'sbc': np.array([s.sbc for s in steps], dtype=float),
            'sbic': np.array([s.sbic for s in steps], dtype=float),
            'rmse': np.array([s.rmse for s in steps], dtype=float),
        }

    def summary(self) -> str:
        """olsrr-style selection summary followed by the final model."""
        params = self._result.params
        title = f"Stepwise Selection Summary ({params.direction}, criterion: {params.criterion})"
        width = 100
        lines = [title, "=" * width]

        if params.criterion == 'p':
            thresholds = []
            if params.entry_alpha is not None:
                thresholds.append(f"entry alpha: {params.entry_alpha}")
            if params.removal_alpha is not None:
                thresholds.append(f"removal alpha: {params.removal_alpha}")
            lines.append(", ".join(thresholds))
        if params.constraints.included:
            lines.append(f"Included: {list(params.constraints.included_ordered)}")
        if params.constraints.excluded:
            lines.append(f"Excluded: {list(params.constraints.ordered(params.constraints.excluded))}")

        if self.no_change:
            lines.append("")
            lines.append("No variables entered or removed.")
        else:
            lines.extend([
                "-" * width,
                f"{'Step':>4}  {'Variable':<12} {'Action':<8} {'Criterion':>10} {'R-Square':>9} "
                f"{'Adj. R2':>9} {'AIC':>10} {'SBC':>10} {'SBIC':>10} {'RMSE':>8}",
                "-" * width,
            ])
            for s in self.steps:
                lines.append(
                    f"{s.step:>4}  {s.variable:<12} {s.action:<8} {_fmt(s.criterion_value, 10)} "
                    f"{_fmt(s.r2, 9)} {_fmt(s.adj_r2, 9)} {_fmt(s.aic, 10)} "
                    f"{_fmt(s.sbc, 10)} {_fmt(s.sbic, 10)} {_fmt(s.rmse, 8)}"
                )
            lines.append("-" * width)

        lines.append(f"Final model: {list(self.predictors)}")
        lines.append("")
        lines.append(self.model.summary())

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SelectionSolution(direction={self.direction!r}, "
            f"criterion={self.criterion!r}, steps={self.n_steps}, "
            f"predictors={list(self.predictors)})"
        )


@dataclass
class SubsetSolution:
    """
    User-facing all-possible / best-subset results.

    All-possible rows are grouped by subset size (ascending) and ordered
    by R² within each size. Best-subset rows hold one subset per size.
    """
    _result: Result[SubsetParams]
    _design: 'SelectionDesign'

    @property
    def rows(self) -> tuple[SubsetRow, ...]:
        return self._result.params.rows

    @property
    def n_models(self) -> int:
        return len(self._result.params.rows)

    @property
    def kind(self) -> str:
        return self._result.params.kind

    @property
    def metric(self) -> str | None:
        return self._result.params.metric

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._result.params.candidates

    @property
    def constraints(self) -> ConstraintSet:
        return self._result.params.constraints

    @property
    def max_order(self) -> int:
        return self._result.params.max_order

    def row(self, mindex: int) -> SubsetRow:
        """Row by its 1-based model index."""
        for r in self.rows:
            if r.mindex == mindex:
                return r
        raise KeyError(f"No model with mindex={mindex}; have 1..{self.n_models}")

    def by_size(self, n: int) -> tuple[SubsetRow, ...]:
        """Rows whose subsets hold ``n`` predictors."""
        return tuple(r for r in self.rows if r.n == n)

    def betas(self) -> tuple[tuple[int, int, str, float], ...]:
        """
        Coefficients of every subset in long form.

        Returns:
            (mindex, n, term, estimate) tuples, intercept first within
            each model.
        """
        out = []
        for r in self.rows:
            for term, beta in r.coefficients.items():
                out.append((r.mindex, r.n, term, beta))
        return tuple(out)

    def to_dataframe(self):
        """Rows as a pandas DataFrame, predictors joined by spaces."""
        import pandas as pd

        records = []
        for r in self.rows:
            record = r.as_dict()
            record.pop('coefficients')
            record['predictors'] = " ".join(r.predictors)
            records.append(record)
        return pd.DataFrame.from_records(records)

    # --- Metadata ---

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

    # --- Reportable ---

    def plot_data(self) -> dict[str, Any]:
        """Every metric as an array over rows, plus mindex and n."""
        data: dict[str, Any] = {
            'mindex': np.array([r.mindex for r in self.rows], dtype=int),
            'n': np.array([r.n for r in self.rows], dtype=int),
            'predictors': [" ".join(r.predictors) for r in self.rows],
        }
        for name in VALID_METRICS:
            data[name] = np.array([r.metric(name) for r in self.rows], dtype=float)
        return data

    def summary(self) -> str:
        if self.kind == 'best_subset':
            title = f"Best Subsets Regression (metric: {self.metric})"
        else:
            title = "All Possible Regressions"
        width = 110
        lines = [
            title,
            "=" * width,
            f"Candidates: {list(self.candidates)}",
        ]
        if self.constraints.included:
            lines.append(f"Included in every model: {list(self.constraints.included_ordered)}")
        lines.extend([
            "-" * width,
            f"{'Index':>5} {'N':>3}  {'Predictors':<30} {'R-Square':>9} {'Adj. R2':>9} "
            f"{'Pred R2':>9} {'Cp':>9} {'AIC':>10} {'SBIC':>10} {'SBC':>10}",
            "-" * width,
        ])
        for r in self.rows:
            preds = " ".join(r.predictors)
            lines.append(
                f"{r.mindex:>5} {r.n:>3}  {preds:<30} {_fmt(r.rsquare, 9)} {_fmt(r.adjr, 9)} "
                f"{_fmt(r.predrsq, 9)} {_fmt(r.cp, 9)} {_fmt(r.aic, 10)} "
                f"{_fmt(r.sbic, 10)} {_fmt(r.sbc, 10)}"
            )
        lines.append("-" * width)

        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"SubsetSolution(kind={self.kind!r}, n_models={self.n_models})"
