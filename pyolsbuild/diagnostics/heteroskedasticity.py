"""
Tests for non-constant error variance.

Both tests regress a scaled squared residual on a set of variables Z
(the fitted values, the model's predictors, or a chosen subset):

    Breusch-Pagan   ind = e² / (SSE/n) - 1,   statistic = ESS(ind ~ Z) / 2
    Score test      s   = e² / (SSE/n),       statistic = n R²(s ~ Z)

(Cook-Weisberg's score test is the studentized form and does not
assume normal errors.) Under H0 each statistic is chi-squared with
df = number of columns of Z.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyolsbuild.core.compute.timing import Timer
from pyolsbuild.core.exceptions import ConfigurationError, NotComputableError
from pyolsbuild.core.result import Result
from pyolsbuild.core.validation import check_choice
from pyolsbuild.diagnostics._common import HeteroskedasticityParams, VALID_P_ADJUST
from pyolsbuild.diagnostics._p_adjust import p_adjust as _p_adjust
from pyolsbuild.diagnostics.solution import HeteroskedasticitySolution
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.regression.solvers import fit

BP_METHOD = "Breusch Pagan Test for Heteroskedasticity"
SCORE_METHOD = "Score Test for Heteroskedasticity"


def _scaled_squared_residuals(model: LinearSolution) -> NDArray[np.floating[Any]]:
    if model.rss <= 0:
        raise NotComputableError(
            "heteroskedasticity: residual sum of squares is zero",
            criterion='heteroskedasticity',
        )
    return model.residuals ** 2 / (model.rss / model.n)


def _bp_statistic(ind: NDArray, Z: NDArray, names: Sequence[str]) -> float:
    aux = fit(Z, ind, names=list(names), response='ind')
    return float(aux.tss - aux.rss) / 2.0


def _score_statistic(scaled: NDArray, Z: NDArray, names: Sequence[str]) -> float:
    aux = fit(Z, scaled, names=list(names), response='scaled')
    return float(aux.n * aux.r_squared)


def _resolve_vars(model: LinearSolution, vars: Sequence[str] | str | None) -> tuple[str, ...] | None:
    if vars is None:
        return None
    names = (vars,) if isinstance(vars, str) else tuple(vars)
    if not names:
        return None
    unknown = [v for v in names if v not in model.predictors]
    if unknown:
        raise ConfigurationError(
            f"vars: {unknown} not in model predictors {list(model.predictors)}"
        )
    return names


def _regressors(model: LinearSolution, names: Sequence[str]) -> NDArray[np.floating[Any]]:
    return np.column_stack([model.design.column(name) for name in names])


def breusch_pagan(
    model: LinearSolution,
    *,
    fitted_values: bool = True,
    rhs: bool = False,
    multiple: bool = False,
    p_adjust: str = 'none',
    vars: Sequence[str] | str | None = None,
) -> HeteroskedasticitySolution:
    """
    Breusch-Pagan test for heteroskedasticity.

    Args:
        model: Fitted model
        fitted_values: Regress on the fitted values (default). Forced to
            False when ``vars`` is given.
        rhs: Regress on all predictors of the model
        multiple: Test each variable separately, then all jointly
        p_adjust: Adjustment for the individual tests in multiple mode:
            'none', 'bonferroni', 'sidak' or 'holm'
        vars: Subset of predictors to regress on

    Returns:
        HeteroskedasticitySolution. In multiple mode the individual
        statistics are followed by the joint ("simultaneous") one.

    Raises:
        ConfigurationError: Unknown p_adjust or vars, or no regressors
            selected (fitted_values=False, rhs=False, vars=None)
    """
    check_choice(p_adjust, VALID_P_ADJUST, 'p_adjust')
    names = _resolve_vars(model, vars)
    if names is not None:
        fitted_values = False
    if not fitted_values and not rhs and names is None:
        raise ConfigurationError(
            "breusch_pagan: no regressors selected; set fitted_values, rhs or vars"
        )

    timer = Timer()
    timer.start()

    with timer.section('auxiliary_fits'):
        ind = _scaled_squared_residuals(model) - 1.0

        if fitted_values and not rhs:
            variables = (f"fitted values of {model.response}",)
            stat = _bp_statistic(ind, model.fitted_values, ['fitted'])
            labels, stats_, dfs = ('fitted values',), (stat,), (1,)
            p_values = (float(sp_stats.chi2.sf(stat, 1)),)
        else:
            tested = model.predictors if rhs else names
            Z = _regressors(model, tested)
            variables = tuple(tested)

            if multiple and len(tested) > 1:
                individual = [
                    _bp_statistic(ind, Z[:, [j]], [name])
                    for j, name in enumerate(tested)
                ]
                raw_p = sp_stats.chi2.sf(np.array(individual), 1)
                joint = _bp_statistic(ind, Z, tested)
                adjusted = _p_adjust(raw_p, p_adjust, n=len(tested))

                labels = tuple(tested) + ('simultaneous',)
                stats_ = tuple(individual) + (joint,)
                dfs = (1,) * len(tested) + (len(tested),)
                p_values = tuple(float(v) for v in adjusted) + (
                    float(sp_stats.chi2.sf(joint, len(tested))),
                )
            else:
                multiple = False
                stat = _bp_statistic(ind, Z, tested)
                labels, stats_, dfs = ('joint',), (stat,), (len(tested),)
                p_values = (float(sp_stats.chi2.sf(stat, len(tested))),)

    timer.stop()

    params = HeteroskedasticityParams(
        method=BP_METHOD,
        labels=labels,
        statistics=stats_,
        df=dfs,
        p_values=p_values,
        variables=variables,
        fitted_values=fitted_values,
        rhs=rhs,
        multiple=multiple,
        p_adjust=p_adjust,
    )
    return HeteroskedasticitySolution(_result=Result(
        params=params,
        info={'n': model.n, 'response': model.response},
        timing=timer.result(),
        backend_name='cpu_qr',
    ))


def score_test(
    model: LinearSolution,
    *,
    fitted_values: bool = True,
    rhs: bool = False,
    vars: Sequence[str] | str | None = None,
) -> HeteroskedasticitySolution:
    """
    Cook-Weisberg score test for heteroskedasticity.

    Regressor selection follows breusch_pagan(): fitted values by
    default, every predictor when ``rhs``, otherwise ``vars``. ``rhs``
    takes precedence over ``vars``.
    """
    names = _resolve_vars(model, vars)
    if names is not None:
        fitted_values = False
    if not fitted_values and not rhs and names is None:
        raise ConfigurationError(
            "score_test: no regressors selected; set fitted_values, rhs or vars"
        )

    timer = Timer()
    timer.start()

    with timer.section('auxiliary_fits'):
        scaled = _scaled_squared_residuals(model)
        if rhs:
            variables = tuple(model.predictors)
            stat = _score_statistic(scaled, _regressors(model, variables), variables)
        elif fitted_values:
            variables = (f"fitted values of {model.response}",)
            stat = _score_statistic(scaled, model.fitted_values, ['fitted'])
        else:
            variables = names
            stat = _score_statistic(scaled, _regressors(model, names), names)
        df = 1 if (fitted_values and not rhs) else len(variables)

    timer.stop()

    params = HeteroskedasticityParams(
        method=SCORE_METHOD,
        labels=('joint',),
        statistics=(stat,),
        df=(df,),
        p_values=(float(sp_stats.chi2.sf(stat, df)),),
        variables=variables,
        fitted_values=fitted_values,
        rhs=rhs,
        multiple=False,
        p_adjust='none',
    )
    return HeteroskedasticitySolution(_result=Result(
        params=params,
        info={'n': model.n, 'response': model.response},
        timing=timer.result(),
        backend_name='cpu_qr',
    ))
