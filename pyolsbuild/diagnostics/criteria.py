"""
Model selection criteria for fitted OLS models.

Pure functions over a LinearSolution (and, for Mallow's Cp and Sawa's
SBIC, the reference full model). Conventions used throughout:

    n    number of observations
    p    number of coefficients, intercept included
    SSE  residual sum of squares
    MSE  SSE / (n - p)

Information criteria come in two reproducible families:

    'R'      -2 logLik + k (p + 1)      (sigma counted as a parameter)
    'STATA'  -2 logLik + k p
    'SAS'    n ln(SSE / n) + k p

with k = 2 for AIC and k = ln(n) for SBC.

Every function raises NotComputableError when the degrees of freedom it
needs are non-positive or a logarithm of SSE would be undefined.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Literal

import numpy as np
from scipy import stats as sp_stats

from pyolsbuild.core.exceptions import NotComputableError
from pyolsbuild.regression.solution import LinearSolution

AICMethod = Literal['R', 'STATA', 'SAS']
AIC_METHODS = ('R', 'STATA', 'SAS')


def _require_df(df: int, criterion: str) -> None:
    if df <= 0:
        raise NotComputableError(
            f"{criterion}: requires positive degrees of freedom, got {df}",
            criterion=criterion,
            df=df,
        )


def _require_sse(sse: float, criterion: str) -> None:
    if sse <= 0:
        raise NotComputableError(
            f"{criterion}: residual sum of squares is {sse}, log undefined",
            criterion=criterion,
        )


def _check_method(method: str, criterion: str) -> None:
    if method not in AIC_METHODS:
        raise ValueError(f"{criterion}: method must be one of {AIC_METHODS}, got {method!r}")


def log_likelihood(model: LinearSolution) -> float:
    """Gaussian log-likelihood, -n/2 (ln 2π + 1 - ln n + ln SSE)."""
    _require_sse(model.rss, 'loglik')
    return model.log_likelihood


def _information_criterion(
    model: LinearSolution,
    penalty: float,
    method: str,
    criterion: str,
) -> float:
    n = model.n
    p = model.n_coefficients
    sse = model.rss
    _require_sse(sse, criterion)

    if method == 'R':
        return -2.0 * model.log_likelihood + penalty * (p + 1)
    if method == 'STATA':
        return -2.0 * model.log_likelihood + penalty * p
    return n * math.log(sse / n) + penalty * p


def aic(
    model: LinearSolution,
    method: AICMethod = 'R',
    corrected: bool = False,
) -> float:
    """
    Akaike information criterion.

    Args:
        model: Fitted model
        method: 'R', 'STATA' or 'SAS' (see module docstring)
        corrected: Small-sample correction; SAS method only, ignored otherwise.
            n ln(SSE/n) + n (n + p) / (n - p - 2)
    """
    _check_method(method, 'aic')
    if method == 'SAS' and corrected:
        n = model.n
        p = model.n_coefficients
        _require_df(n - p - 2, 'aic')
        _require_sse(model.rss, 'aic')
        return n * math.log(model.rss / n) + (n * (n + p)) / (n - p - 2)
    return _information_criterion(model, 2.0, method, 'aic')


def sbc(model: LinearSolution, method: AICMethod = 'R') -> float:
    """Schwarz Bayesian criterion: as AIC with ln(n) per parameter."""
    _check_method(method, 'sbc')
    return _information_criterion(model, math.log(model.n), method, 'sbc')


def sbic(model: LinearSolution, full_model: LinearSolution) -> float:
    """
    Sawa's Bayesian information criterion.

    Uses the full model's residual mean square as the pure-error variance:

        q    = n MSE_full / SSE
        SBIC = n ln(SSE / n) + 2 (p + 2) q - 2 q²
    """
    n = model.n
    p = model.n_coefficients
    sse = model.rss
    _require_df(full_model.df_residual, 'sbic')
    _require_df(model.df_residual, 'sbic')
    _require_sse(sse, 'sbic')

    q = n * full_model.mse / sse
    return n * math.log(sse / n) + 2.0 * (p + 2) * q - 2.0 * q ** 2


def mallows_cp(model: LinearSolution, full_model: LinearSolution) -> float:
    """Mallow's Cp: SSE / MSE_full - (n - 2p)."""
    n = model.n
    p = model.n_coefficients
    _require_df(full_model.df_residual, 'cp')
    _require_df(model.df_residual, 'cp')
    return model.rss / full_model.mse - (n - 2 * p)


def msep(model: LinearSolution) -> float:
    """
    Estimated mean square error of prediction.

    (n + 1)(n - 2) SSE / (n (n - p - 1)), assuming multivariate normal
    predictors.
    """
    n = model.n
    p = model.n_coefficients
    _require_df(n - p - 1, 'msep')
    return ((n + 1) * (n - 2) * model.rss) / (n * (n - p - 1))


def fpe(model: LinearSolution) -> float:
    """Final prediction error: MSE (n + p) / n."""
    n = model.n
    p = model.n_coefficients
    _require_df(n - p, 'fpe')
    return ((n + p) / n) * model.mse


def apc(model: LinearSolution) -> float:
    """Amemiya's prediction criterion: (n + p)/(n - p) (1 - R²)."""
    n = model.n
    p = model.n_coefficients
    _require_df(n - p, 'apc')
    return ((n + p) / (n - p)) * (1.0 - model.r_squared)


def hsp(model: LinearSolution) -> float:
    """Hocking's Sp: MSE / (n - p - 1)."""
    n = model.n
    p = model.n_coefficients
    _require_df(n - p - 1, 'hsp')
    return model.mse / (n - p - 1)


def press(model: LinearSolution) -> float:
    """Prediction sum of squares, Σ (e_i / (1 - h_i))²."""
    denom = 1.0 - model.leverage
    if np.any(denom <= 0):
        raise NotComputableError(
            "press: an observation has leverage 1",
            criterion='press',
        )
    return float(np.sum((model.residuals / denom) ** 2))


def pred_rsq(model: LinearSolution) -> float:
    """Predicted R²: 1 - PRESS / TSS."""
    if model.tss <= 0:
        raise NotComputableError(
            "predrsq: total sum of squares is zero",
            criterion='predrsq',
        )
    return 1.0 - press(model) / model.tss


def coefficient_p_value(estimate: float, std_error: float, df: int) -> float:
    """Two-sided t-test p-value of H0: coefficient = 0."""
    _require_df(df, 'p')
    if not np.isfinite(std_error) or std_error <= 0:
        raise NotComputableError(
            f"p: standard error is {std_error}",
            criterion='p',
            df=df,
        )
    t = estimate / std_error
    return float(2.0 * sp_stats.t.sf(abs(t), df))


@dataclass(frozen=True)
class ModelMetrics:
    """Every selection criterion of one fitted model."""
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

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def model_metrics(
    model: LinearSolution,
    full_model: LinearSolution,
    *,
    method: AICMethod = 'R',
    on_error: Literal['raise', 'nan'] = 'raise',
) -> tuple[ModelMetrics, tuple[str, ...]]:
    """
    Compute the full metric vector of a model.

    Args:
        model: Fitted candidate
        full_model: Reference model for Cp and SBIC
        method: Information-criterion family for AIC and SBC
        on_error: 'raise' propagates NotComputableError; 'nan' records NaN
            for the failing metric and reports it

    Returns:
        (ModelMetrics, messages for metrics that were not computable)
    """
    calculators = {
        'predrsq': lambda: pred_rsq(model),
        'cp': lambda: mallows_cp(model, full_model),
        'aic': lambda: aic(model, method=method),
        'sbic': lambda: sbic(model, full_model),
        'sbc': lambda: sbc(model, method=method),
        'msep': lambda: msep(model),
        'fpe': lambda: fpe(model),
        'apc': lambda: apc(model),
        'hsp': lambda: hsp(model),
    }
    values: dict[str, float] = {}
    problems: list[str] = []
    for name, compute in calculators.items():
        try:
            values[name] = compute()
        except NotComputableError as e:
            if on_error == 'raise':
                raise
            values[name] = float('nan')
            problems.append(str(e))

    metrics = ModelMetrics(
        rsquare=model.r_squared,
        adjr=model.adjusted_r_squared,
        rmse=model.rmse,
        **values,
    )
    return metrics, tuple(problems)
