"""
All-possible and best-subset enumeration.

Every non-empty combination of the free predictors up to ``max_order``
is fitted (together with any included predictors) and scored with the
full ModelMetrics vector. Combinations are generated in lexicographic
order of the declared predictor positions, so 2^p - 1 models are
fitted without a cap, or Σ_{k<=m} C(p, k) with max_order = m.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import combinations

from pyolsbuild.core.exceptions import ConfigurationError, TooFewPredictorsError
from pyolsbuild.diagnostics.criteria import AICMethod, ModelMetrics, model_metrics
from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._candidate import fit_candidate
from pyolsbuild.selection._common import HIGHER_IS_BETTER, SubsetRow
from pyolsbuild.selection._constraints import ConstraintSet


@dataclass(frozen=True)
class _Scored:
    predictors: tuple[str, ...]
    metrics: ModelMetrics
    coefficients: dict[str, float]


def resolve_max_order(max_order: int | None, n_candidates: int) -> int:
    """Validate max_order against the candidate count; None means all."""
    if max_order is None:
        return n_candidates
    if isinstance(max_order, bool) or not isinstance(max_order, int):
        raise ConfigurationError(f"max_order: expected an integer, got {max_order!r}")
    if not 1 <= max_order <= n_candidates:
        raise ConfigurationError(
            f"max_order: must be between 1 and {n_candidates}, got {max_order}"
        )
    return max_order


def candidate_pool(constraints: ConstraintSet) -> tuple[str, ...]:
    """
    Free predictors to combine.

    Raises:
        TooFewPredictorsError: Fewer than 2 candidates remain
    """
    pool = constraints.free
    if len(pool) < 2:
        raise TooFewPredictorsError(
            f"Subset enumeration needs at least 2 candidate predictors after "
            f"include/exclude, got {len(pool)}",
            n_predictors=len(pool),
            required=2,
        )
    return pool


def expected_count(n_candidates: int, max_order: int) -> int:
    return sum(math.comb(n_candidates, k) for k in range(1, max_order + 1))


def enumerate_subsets(
    design: RegressionDesign,
    full_model: LinearSolution,
    constraints: ConstraintSet,
    *,
    max_order: int | None = None,
    method: AICMethod = 'R',
) -> tuple[list[_Scored], list[str]]:
    """
    Fit and score every subset.

    Returns:
        (scored subsets in generation order, messages for metrics that
        were not computable and were recorded as NaN)
    """
    pool = candidate_pool(constraints)
    order = resolve_max_order(max_order, len(pool))
    included = constraints.included_ordered

    scored: list[_Scored] = []
    messages: list[str] = []
    for k in range(1, order + 1):
        for combo in combinations(pool, k):
            predictors = included + combo
            candidate = fit_candidate(design, predictors)
            metrics, problems = model_metrics(
                candidate.model, full_model, method=method, on_error='nan',
            )
            messages.extend(f"{list(predictors)}: {p}" for p in problems)
            scored.append(_Scored(
                predictors=predictors,
                metrics=metrics,
                coefficients=candidate.coefficients,
            ))
    return scored, messages


def _row(index: int, entry: _Scored) -> SubsetRow:
    return SubsetRow(
        mindex=index,
        n=len(entry.predictors),
        predictors=entry.predictors,
        coefficients=entry.coefficients,
        **entry.metrics.as_dict(),
    )


def all_possible_rows(scored: list[_Scored]) -> tuple[SubsetRow, ...]:
    """
    Group by subset size, order each group by R² descending.

    The sort is stable, so equal R² keep generation order. Rows are then
    numbered 1..N.
    """
    ordered = sorted(scored, key=lambda e: (len(e.predictors), -e.metrics.rsquare))
    return tuple(_row(i, e) for i, e in enumerate(ordered, start=1))


def best_subset_rows(scored: list[_Scored], metric: str) -> tuple[SubsetRow, ...]:
    """
    Keep the best subset of each size under ``metric``.

    NaN values never win; ties go to the earliest generated subset.
    """
    def score(entry: _Scored) -> float:
        value = getattr(entry.metrics, metric)
        if math.isnan(value):
            return math.inf
        return -value if metric in HIGHER_IS_BETTER else value

    by_size: dict[int, list[_Scored]] = {}
    for entry in scored:
        by_size.setdefault(len(entry.predictors), []).append(entry)

    winners = [min(by_size[size], key=score) for size in sorted(by_size)]
    return tuple(_row(i, e) for i, e in enumerate(winners, start=1))
