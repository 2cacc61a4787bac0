"""
Variable selection solvers.

Public API:
    step_forward(model, ...) -> SelectionSolution
    step_backward(model, ...) -> SelectionSolution
    step_both(model, ...) -> SelectionSolution
    all_possible(model, ...) -> SubsetSolution
    best_subset(model, ...) -> SubsetSolution
    select(model, direction=..., ...) -> SelectionSolution | SubsetSolution

``model`` is always the fitted reference (full) model; every candidate
uses its design and response.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable

from pyolsbuild.core.compute.timing import Timer
from pyolsbuild.core.exceptions import ConfigurationError
from pyolsbuild.core.result import Result
from pyolsbuild.core.validation import check_choice, check_probability
from pyolsbuild.diagnostics.criteria import AIC_METHODS, AICMethod
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._candidate import fit_candidate, fit_null
from pyolsbuild.selection._common import (
    CriterionChoice,
    DirectionChoice,
    SelectionParams,
    SubsetMetric,
    SubsetParams,
    STEPWISE_DIRECTIONS,
    VALID_CRITERIA,
    VALID_DIRECTIONS,
    VALID_METRICS,
)
from pyolsbuild.selection._criteria import make_criterion
from pyolsbuild.selection._exhaustive import (
    all_possible_rows,
    best_subset_rows,
    candidate_pool,
    enumerate_subsets,
    expected_count,
    resolve_max_order,
)
from pyolsbuild.selection._stepwise import StepwiseEngine
from pyolsbuild.selection.design import SelectionDesign
from pyolsbuild.selection.solution import SelectionSolution, SubsetSolution

Names = str | int | Iterable[str | int] | None


def step_forward(
    model: LinearSolution,
    *,
    criterion: CriterionChoice = 'p',
    entry_alpha: float = 0.1,
    include: Names = None,
    exclude: Names = None,
    hierarchical: bool = False,
    method: AICMethod = 'R',
    progress: bool = False,
    details: bool = False,
) -> SelectionSolution:
    """
    Forward stepwise selection.

    Starts from the included predictors (intercept-only when none) and
    enters, one at a time, the free predictor that improves the model
    most, while it passes the entry test.

    Args:
        model: Fitted reference model holding every candidate predictor
        criterion: 'p' (coefficient p-value), 'aic', 'sbc', 'sbic', 'rsq'
            or 'adjrsq'
        entry_alpha: Significance level for entry (criterion 'p')
        include: Predictors forced into every model (names or 0-based indices)
        exclude: Predictors never considered
        hierarchical: Test predictors strictly in declared order and stop
            at the first that fails to enter
        method: Information-criterion family for AIC/SBC: 'R', 'STATA', 'SAS'
        progress: Print each accepted step and the final state
        details: Also print every candidate's statistic

    Returns:
        SelectionSolution

    Examples:
        >>> full = fit(RegressionDesign.from_datasource(ds, x=['disp', 'hp', 'wt', 'qsec'], y='mpg'))
        >>> result = step_forward(full)
        >>> result.predictors
        ('wt', 'hp')
    """
    return _run_stepwise(
        'forward', model,
        criterion=criterion, entry_alpha=entry_alpha, removal_alpha=None,
        include=include, exclude=exclude, hierarchical=hierarchical,
        method=method, progress=progress, details=details,
    )


def step_backward(
    model: LinearSolution,
    *,
    criterion: CriterionChoice = 'p',
    removal_alpha: float = 0.3,
    include: Names = None,
    exclude: Names = None,
    method: AICMethod = 'R',
    progress: bool = False,
    details: bool = False,
) -> SelectionSolution:
    """
    Backward elimination.

    Starts from every non-excluded predictor and removes, one at a time,
    the non-included predictor whose removal passes the removal test:
    the largest coefficient p-value above ``removal_alpha`` (criterion
    'p'), or the removal that most improves the criterion.
    """
    return _run_stepwise(
        'backward', model,
        criterion=criterion, entry_alpha=None, removal_alpha=removal_alpha,
        include=include, exclude=exclude, hierarchical=False,
        method=method, progress=progress, details=details,
    )


def step_both(
    model: LinearSolution,
    *,
    criterion: CriterionChoice = 'p',
    entry_alpha: float = 0.1,
    removal_alpha: float = 0.3,
    include: Names = None,
    exclude: Names = None,
    method: AICMethod = 'R',
    progress: bool = False,
    details: bool = False,
) -> SelectionSolution:
    """
    Bidirectional stepwise selection.

    Each iteration enters one predictor (as step_forward) and then
    removes predictors (as step_backward) until none passes. Stops when
    nothing enters, or when an iteration ends on a predictor set seen
    before (reported as a warning).
    """
    return _run_stepwise(
        'both', model,
        criterion=criterion, entry_alpha=entry_alpha, removal_alpha=removal_alpha,
        include=include, exclude=exclude, hierarchical=False,
        method=method, progress=progress, details=details,
    )


def all_possible(
    model: LinearSolution,
    *,
    max_order: int | None = None,
    include: Names = None,
    exclude: Names = None,
    method: AICMethod = 'R',
) -> SubsetSolution:
    """
    Fit every subset of the candidate predictors.

    Rows are grouped by subset size and ordered by R² (descending)
    within each size, then numbered 1..N.

    Args:
        model: Fitted reference model
        max_order: Largest number of free predictors per subset
            (default: all candidates)
        include: Predictors added to every subset
        exclude: Predictors never considered
        method: Information-criterion family for AIC/SBC

    Raises:
        TooFewPredictorsError: Fewer than 2 candidates after include/exclude
        ConfigurationError: max_order outside 1..#candidates
    """
    return _run_subsets(
        'all_possible', model, max_order=max_order, metric=None,
        include=include, exclude=exclude, method=method,
    )


def best_subset(
    model: LinearSolution,
    *,
    max_order: int | None = None,
    metric: SubsetMetric = 'rsquare',
    include: Names = None,
    exclude: Names = None,
    method: AICMethod = 'R',
) -> SubsetSolution:
    """
    Best subset of each size.

    Enumerates like all_possible() and keeps, per subset size, the
    subset that is best under ``metric`` (higher for rsquare, adjr and
    predrsq; lower for cp, aic, sbic, sbc, msep, fpe, apc and hsp).
    """
    check_choice(metric, VALID_METRICS, 'metric')
    return _run_subsets(
        'best_subset', model, max_order=max_order, metric=metric,
        include=include, exclude=exclude, method=method,
    )


def select(
    model: LinearSolution,
    *,
    direction: DirectionChoice,
    criterion: CriterionChoice = 'p',
    entry_alpha: float = 0.1,
    removal_alpha: float = 0.3,
    include: Names = None,
    exclude: Names = None,
    hierarchical: bool = False,
    max_order: int | None = None,
    metric: SubsetMetric = 'rsquare',
    method: AICMethod = 'R',
    progress: bool = False,
    details: bool = False,
) -> SelectionSolution | SubsetSolution:
    """
    Single entry point over every search direction.

    ``direction`` is one of 'forward', 'backward', 'both', 'exhaustive'
    (all-possible regression) or 'best-subset'. Options that do not
    apply to the chosen direction are ignored, except ``hierarchical``,
    which is an error for anything but 'forward'.
    """
    check_choice(direction, VALID_DIRECTIONS, 'direction')
    check_choice(criterion, VALID_CRITERIA, 'criterion')
    if hierarchical and direction != 'forward':
        raise ConfigurationError(
            f"hierarchical: only supported for direction='forward', got {direction!r}"
        )

    if direction == 'exhaustive':
        return all_possible(model, max_order=max_order, include=include,
                            exclude=exclude, method=method)
    if direction == 'best-subset':
        return best_subset(model, max_order=max_order, metric=metric, include=include,
                           exclude=exclude, method=method)

    return _run_stepwise(
        direction, model,
        criterion=criterion,
        entry_alpha=None if direction == 'backward' else entry_alpha,
        removal_alpha=None if direction == 'forward' else removal_alpha,
        include=include, exclude=exclude, hierarchical=hierarchical,
        method=method, progress=progress, details=details,
    )


def _run_stepwise(
    direction: str,
    model: LinearSolution,
    *,
    criterion: str,
    entry_alpha: float | None,
    removal_alpha: float | None,
    include: Names,
    exclude: Names,
    hierarchical: bool,
    method: str,
    progress: bool,
    details: bool,
) -> SelectionSolution:
    # This is the boundary - validate here, trust everywhere else
    check_choice(direction, STEPWISE_DIRECTIONS, 'direction')
    check_choice(criterion, VALID_CRITERIA, 'criterion')
    check_choice(method, AIC_METHODS, 'method')
    if entry_alpha is not None:
        check_probability(entry_alpha, 'entry_alpha')
    if removal_alpha is not None:
        check_probability(removal_alpha, 'removal_alpha')
    if hierarchical and direction != 'forward':
        raise ConfigurationError(
            f"hierarchical: only supported for direction='forward', got {direction!r}"
        )

    if criterion == 'sbic' and model.df_residual <= 0:
        raise ConfigurationError(
            f"criterion: 'sbic' needs a reference model with residual degrees "
            f"of freedom, got {model.df_residual}"
        )

    design = SelectionDesign.from_model(model, include=include, exclude=exclude)
    strategy = make_criterion(
        criterion,
        full_model=model,
        entry_alpha=entry_alpha if entry_alpha is not None else 0.1,
        removal_alpha=removal_alpha if removal_alpha is not None else 0.3,
        method=method,
    )

    verbose = progress or details
    if verbose:
        print(f"Stepwise {direction} selection on {design.response}: "
              f"{len(design.predictors)} predictors, {design.n} observations, "
              f"criterion {criterion!r}")
        if design.constraints.included:
            print(f"Included: {list(design.constraints.included_ordered)}")
        if design.constraints.excluded:
            print(f"Excluded: {list(design.constraints.ordered(design.constraints.excluded))}")

    engine = StepwiseEngine(
        design.regression_design,
        model,
        strategy,
        design.constraints,
        direction=direction,
        hierarchical=hierarchical,
        method=method,
        progress=print if verbose else None,
        details=print if details else None,
    )

    timer = Timer()
    timer.start()

    with timer.section('search'):
        outcome = engine.run()

    with timer.section('final_fit'):
        if outcome.final.predictors:
            final = fit_candidate(design.regression_design, outcome.final.predictors)
        else:
            final = fit_null(design.regression_design)
        final = final.with_criterion(strategy.model_value(final))

    timer.stop()

    if outcome.cycled:
        warnings.warn(
            f"Stepwise {direction} search revisited a predictor set and was stopped; "
            f"see result.warnings",
            RuntimeWarning,
            stacklevel=3,
        )

    params = SelectionParams(
        model=final,
        initial=outcome.initial,
        steps=outcome.steps,
        direction=direction,
        criterion=criterion,
        constraints=design.constraints,
        entry_alpha=entry_alpha,
        removal_alpha=removal_alpha,
        hierarchical=hierarchical,
        method=method,
    )
    info = {
        'state': outcome.state.value,
        'iterations': outcome.iterations,
        'n_fits': outcome.n_fits,
        'n_steps': len(outcome.steps),
        'cycled': outcome.cycled,
        'direction': direction,
        'criterion': criterion,
    }
    result = Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=model.backend_name,
        warnings=outcome.warnings,
    )
    return SelectionSolution(_result=result, _design=design)


def _run_subsets(
    kind: str,
    model: LinearSolution,
    *,
    max_order: int | None,
    metric: str | None,
    include: Names,
    exclude: Names,
    method: str,
) -> SubsetSolution:
    # This is the boundary - validate here, trust everywhere else
    check_choice(method, AIC_METHODS, 'method')
    design = SelectionDesign.from_model(model, include=include, exclude=exclude)
    pool = candidate_pool(design.constraints)
    order = resolve_max_order(max_order, len(pool))

    timer = Timer()
    timer.start()

    with timer.section('search'):
        scored, messages = enumerate_subsets(
            design.regression_design, model, design.constraints,
            max_order=order, method=method,
        )

    with timer.section('ranking'):
        if kind == 'best_subset':
            rows = best_subset_rows(scored, metric)
        else:
            rows = all_possible_rows(scored)

    timer.stop()

    params = SubsetParams(
        rows=rows,
        kind=kind,
        metric=metric,
        candidates=pool,
        constraints=design.constraints,
        max_order=order,
        method=method,
    )
    info = {
        'n_fits': len(scored),
        'expected_fits': expected_count(len(pool), order),
        'n_candidates': len(pool),
    }
    result = Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=model.backend_name,
        warnings=tuple(messages),
    )
    return SubsetSolution(_result=result, _design=design)
