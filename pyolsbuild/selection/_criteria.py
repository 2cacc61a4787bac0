"""
Criterion strategies for stepwise search.

A strategy turns a (current model, neighbour model, term) triple into a
statistic, says which statistic is best, and decides whether the best
one is good enough to take the step. The stepwise state machine is the
same for every criterion; only the strategy changes.

    'p'        entry: term p-value in the enlarged model, smallest wins,
               enters if p <= entry_alpha
               removal: term p-value in the current model, largest wins,
               leaves if p > removal_alpha
    'aic'      lower is better
    'sbc'      lower is better
    'sbic'     lower is better (needs the full model)
    'rsq'      higher is better
    'adjrsq'   higher is better

Metric criteria take a step only when the neighbour is strictly better
than the current model; equal values never move the search.
"""

from __future__ import annotations

from collections.abc import Callable

from pyolsbuild.diagnostics.criteria import AICMethod, aic, coefficient_p_value, sbc, sbic
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._candidate import CandidateResult


def term_p_value(model: LinearSolution, term: str) -> float:
    """p-value of one predictor's coefficient in ``model``."""
    idx = model.coefficient_names.index(term)
    return coefficient_p_value(
        float(model.coefficients[idx]),
        float(model.standard_errors[idx]),
        model.df_residual,
    )


class CriterionStrategy:
    """Base strategy: statistic, direction and acceptance test."""

    name: str = ''
    higher_is_better: bool = False

    def prefers(self, a: float, b: float) -> bool:
        """Whether statistic ``a`` is strictly better than ``b``."""
        return a > b if self.higher_is_better else a < b

    def model_value(self, candidate: CandidateResult) -> float | None:
        """Criterion value of a whole model, or None for test-based criteria."""
        raise NotImplementedError

    def entry_statistic(self, current: CandidateResult, enlarged: CandidateResult, term: str) -> float:
        raise NotImplementedError

    def removal_statistic(self, current: CandidateResult, reduced: CandidateResult, term: str) -> float:
        raise NotImplementedError

    def prefers_entry(self, a: float, b: float) -> bool:
        return self.prefers(a, b)

    def prefers_removal(self, a: float, b: float) -> bool:
        return self.prefers(a, b)

    def accepts_entry(self, statistic: float, current: CandidateResult) -> bool:
        raise NotImplementedError

    def accepts_removal(self, statistic: float, current: CandidateResult) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class PValueCriterion(CriterionStrategy):
    """Significance-test search on coefficient p-values."""

    name = 'p'

    def __init__(self, entry_alpha: float, removal_alpha: float):
        self.entry_alpha = entry_alpha
        self.removal_alpha = removal_alpha

    def model_value(self, candidate: CandidateResult) -> float | None:
        return None

    def entry_statistic(self, current, enlarged, term):
        return term_p_value(enlarged.model, term)

    def removal_statistic(self, current, reduced, term):
        return term_p_value(current.model, term)

    def prefers_entry(self, a, b):
        return a < b

    def prefers_removal(self, a, b):
        return a > b

    def accepts_entry(self, statistic, current):
        return statistic <= self.entry_alpha

    def accepts_removal(self, statistic, current):
        return statistic > self.removal_alpha


class MetricCriterion(CriterionStrategy):
    """Search on a whole-model criterion; steps must strictly improve it."""

    def __init__(self, name: str, metric: Callable[[LinearSolution], float], higher_is_better: bool):
        self.name = name
        self.metric = metric
        self.higher_is_better = higher_is_better

    def model_value(self, candidate: CandidateResult) -> float:
        if candidate.criterion_value is not None:
            return candidate.criterion_value
        return self.metric(candidate.model)

    def entry_statistic(self, current, enlarged, term):
        return self.metric(enlarged.model)

    def removal_statistic(self, current, reduced, term):
        return self.metric(reduced.model)

    def accepts_entry(self, statistic, current):
        return self.prefers(statistic, self.model_value(current))

    def accepts_removal(self, statistic, current):
        return self.prefers(statistic, self.model_value(current))


def make_criterion(
    name: str,
    *,
    full_model: LinearSolution,
    entry_alpha: float = 0.1,
    removal_alpha: float = 0.3,
    method: AICMethod = 'R',
) -> CriterionStrategy:
    """Build the strategy for a criterion name (validated by the caller)."""
    if name == 'p':
        return PValueCriterion(entry_alpha, removal_alpha)
    if name == 'aic':
        return MetricCriterion('aic', lambda m: aic(m, method=method), higher_is_better=False)
    if name == 'sbc':
        return MetricCriterion('sbc', lambda m: sbc(m, method=method), higher_is_better=False)
    if name == 'sbic':
        return MetricCriterion('sbic', lambda m: sbic(m, full_model), higher_is_better=False)
    if name == 'rsq':
        return MetricCriterion('rsq', lambda m: m.r_squared, higher_is_better=True)
    if name == 'adjrsq':
        return MetricCriterion('adjrsq', lambda m: m.adjusted_r_squared, higher_is_better=True)
    raise ValueError(f"Unknown criterion: {name!r}")
