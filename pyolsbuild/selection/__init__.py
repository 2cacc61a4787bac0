"""
Variable selection for OLS regression.

Stepwise search (forward, backward, bidirectional) under a p-value or
information criterion, and exhaustive all-possible / best-subset
enumeration, with predictors forced in or kept out.

Public API:
    step_forward(model, ...) -> SelectionSolution
    step_backward(model, ...) -> SelectionSolution
    step_both(model, ...) -> SelectionSolution
    all_possible(model, ...) -> SubsetSolution
    best_subset(model, ...) -> SubsetSolution
    select(model, direction=..., ...)

Example:
    >>> from pyolsbuild.datasets import mtcars
    >>> from pyolsbuild.regression import RegressionDesign, fit
    >>> from pyolsbuild.selection import step_forward
    >>> full = fit(RegressionDesign.from_datasource(mtcars(), x=['disp', 'hp', 'wt', 'qsec'], y='mpg'))
    >>> print(step_forward(full).summary())
"""

from pyolsbuild.selection._candidate import CandidateResult, fit_candidate, fit_null
from pyolsbuild.selection._common import (
    CriterionChoice,
    DirectionChoice,
    SearchState,
    StepRecord,
    SubsetMetric,
    SubsetRow,
    SelectionParams,
    SubsetParams,
)
from pyolsbuild.selection._constraints import ConstraintSet
from pyolsbuild.selection._criteria import CriterionStrategy, make_criterion
from pyolsbuild.selection.design import SelectionDesign
from pyolsbuild.selection.solution import SelectionSolution, SubsetSolution
from pyolsbuild.selection.solvers import (
    all_possible,
    best_subset,
    select,
    step_backward,
    step_both,
    step_forward,
)

__all__ = [
    # Solvers
    "step_forward",
    "step_backward",
    "step_both",
    "all_possible",
    "best_subset",
    "select",
    # Solutions
    "SelectionSolution",
    "SubsetSolution",
    # Building blocks
    "SelectionDesign",
    "ConstraintSet",
    "CandidateResult",
    "fit_candidate",
    "fit_null",
    "CriterionStrategy",
    "make_criterion",
    # Types
    "SearchState",
    "StepRecord",
    "SubsetRow",
    "SelectionParams",
    "SubsetParams",
    "CriterionChoice",
    "DirectionChoice",
    "SubsetMetric",
]
