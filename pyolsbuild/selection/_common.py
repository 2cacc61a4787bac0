"""
Common types for variable selection.

Configuration literals, the search state enum, and the frozen payloads
that go inside Result[P] envelopes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Literal

from pyolsbuild.selection._candidate import CandidateResult
from pyolsbuild.selection._constraints import ConstraintSet

CriterionChoice = Literal['p', 'aic', 'sbc', 'sbic', 'rsq', 'adjrsq']
DirectionChoice = Literal['forward', 'backward', 'both', 'exhaustive', 'best-subset']
SubsetMetric = Literal[
    'rsquare', 'adjr', 'predrsq', 'cp', 'aic', 'sbic', 'sbc', 'msep', 'fpe', 'apc', 'hsp',
]

VALID_CRITERIA = ('p', 'aic', 'sbc', 'sbic', 'rsq', 'adjrsq')
VALID_DIRECTIONS = ('forward', 'backward', 'both', 'exhaustive', 'best-subset')
STEPWISE_DIRECTIONS = ('forward', 'backward', 'both')
VALID_METRICS = (
    'rsquare', 'adjr', 'predrsq', 'cp', 'aic', 'sbic', 'sbc', 'msep', 'fpe', 'apc', 'hsp',
)
HIGHER_IS_BETTER = frozenset({'rsquare', 'adjr', 'predrsq'})


class SearchState(Enum):
    """Lifecycle of a stepwise search."""
    READY = 'ready'
    EVALUATING = 'evaluating'
    ADVANCED = 'advanced'
    CONVERGED = 'converged'
    FAILED = 'failed'


@dataclass(frozen=True)
class StepRecord:
    """
    One accepted step of a stepwise search.

    ``predictors`` is the model after the step. ``criterion_value`` is
    the driving statistic (the p-value for p-value search, otherwise the
    criterion of the new model); ``p_value`` is the entered term's
    p-value in the new model, or the removed term's p-value in the model
    it left.
    """
    step: int
    action: Literal['enter', 'remove']
    variable: str
    predictors: tuple[str, ...]
    criterion_value: float
    p_value: float
    r2: float
    adj_r2: float
    aic: float
    sbc: float
    sbic: float
    rmse: float


@dataclass(frozen=True)
class SubsetRow:
    """
    One enumerated subset.

    ``mindex`` is the 1-based row index after ordering, ``n`` the number
    of predictors in the subset.
    """
    mindex: int
    n: int
    predictors: tuple[str, ...]
    rsquare: float
    adjr: float
    rmse: float
    predrsq: float
    cp: float
    aic: float
    sbic: float
    sbc: float
    msep: float
    fpe: float
    apc: float
    hsp: float
    coefficients: dict[str, float]

    def metric(self, name: str) -> float:
        return getattr(self, name)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SearchOutcome:
    """What a stepwise engine run produced."""
    initial: CandidateResult
    final: CandidateResult
    steps: tuple[StepRecord, ...]
    state: SearchState
    iterations: int
    n_fits: int
    warnings: tuple[str, ...]
    cycled: bool = False


@dataclass(frozen=True)
class SelectionParams:
    """Parameter payload for stepwise selection."""
    model: CandidateResult
    initial: CandidateResult
    steps: tuple[StepRecord, ...]
    direction: str
    criterion: str
    constraints: ConstraintSet
    entry_alpha: float | None
    removal_alpha: float | None
    hierarchical: bool
    method: str


@dataclass(frozen=True)
class SubsetParams:
    """Parameter payload for all-possible and best-subset regression."""
    rows: tuple[SubsetRow, ...]
    kind: Literal['all_possible', 'best_subset']
    metric: str | None
    candidates: tuple[str, ...]
    constraints: ConstraintSet
    max_order: int
    method: str
