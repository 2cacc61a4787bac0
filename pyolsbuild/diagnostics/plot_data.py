"""
Data preparation for diagnostic plots.

Rendering is left to the caller; these functions return the plotted
values, the reference thresholds and which observations exceed them.
Observations are numbered from 1, as in the plots they feed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyolsbuild.core.exceptions import NotComputableError
from pyolsbuild.core.validation import check_choice
from pyolsbuild.diagnostics.influence import (
    cooks_distance,
    dfbetas,
    dffits,
    hadi,
    rstandard,
    rstudent,
)
from pyolsbuild.regression.solution import LinearSolution

COOKS_THRESHOLD_TYPES = (1, 2, 3, 4, 5)
LEVERAGE_CLASSES = ("normal", "leverage", "outlier", "outlier & leverage")


@dataclass(frozen=True)
class ThresholdPlotData:
    """
    One statistic per observation against a reference threshold.

    ``two_sided`` statistics are flagged when |value| >= threshold,
    one-sided ones when value >= threshold.
    """
    statistic: str
    observation: NDArray[np.integer[Any]]
    values: NDArray[np.floating[Any]]
    threshold: float
    two_sided: bool
    outlier: NDArray[np.bool_]
    fitted: NDArray[np.floating[Any]] | None = None

    @property
    def outliers(self) -> tuple[tuple[int, float], ...]:
        """(observation, value) of every flagged observation."""
        idx = np.flatnonzero(self.outlier)
        return tuple((int(self.observation[i]), float(self.values[i])) for i in idx)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            'statistic': self.statistic,
            'observation': self.observation,
            'values': self.values,
            'threshold': self.threshold,
            'outlier': self.outlier,
        }
        if self.fitted is not None:
            out['fitted'] = self.fitted
        return out


@dataclass(frozen=True)
class LeveragePlotData:
    """Studentized residuals against leverage, with each point's class."""
    observation: NDArray[np.integer[Any]]
    leverage: NDArray[np.floating[Any]]
    rstudent: NDArray[np.floating[Any]]
    classification: tuple[str, ...]
    leverage_threshold: float
    rstudent_threshold: float

    def to_dict(self) -> dict[str, Any]:
        return {
            'observation': self.observation,
            'leverage': self.leverage,
            'rstudent': self.rstudent,
            'classification': self.classification,
            'leverage_threshold': self.leverage_threshold,
            'rstudent_threshold': self.rstudent_threshold,
        }


@dataclass(frozen=True)
class QQPlotData:
    """Normal Q-Q plot of the residuals with its quartile reference line."""
    theoretical: NDArray[np.floating[Any]]
    sample: NDArray[np.floating[Any]]
    slope: float
    intercept: float

    def to_dict(self) -> dict[str, Any]:
        return {
            'theoretical': self.theoretical,
            'sample': self.sample,
            'slope': self.slope,
            'intercept': self.intercept,
        }


def _observations(n: int) -> NDArray[np.integer[Any]]:
    return np.arange(1, n + 1)


def _threshold_data(
    statistic: str,
    values: NDArray[np.floating[Any]],
    threshold: float,
    two_sided: bool,
    fitted: NDArray[np.floating[Any]] | None = None,
) -> ThresholdPlotData:
    if two_sided:
        outlier = np.abs(values) >= threshold
    else:
        outlier = values >= threshold
    return ThresholdPlotData(
        statistic=statistic,
        observation=_observations(len(values)),
        values=values,
        threshold=float(threshold),
        two_sided=two_sided,
        outlier=outlier,
        fitted=fitted,
    )


def dffits_plot_data(model: LinearSolution, size_adjusted: bool = True) -> ThresholdPlotData:
    """
    DFFITS with its influence threshold.

    size-adjusted:  2 sqrt(p / n)
    normal:         2 sqrt((p + 1) / (n - p - 1))
    """
    n = model.n
    p = model.n_coefficients
    if size_adjusted:
        threshold = 2.0 * np.sqrt(p / n)
    else:
        if n - p - 1 <= 0:
            raise NotComputableError(
                f"dffits: requires positive degrees of freedom, got {n - p - 1}",
                criterion='dffits',
                df=n - p - 1,
            )
        threshold = 2.0 * np.sqrt((p + 1) / (n - p - 1))
    return _threshold_data('dffits', dffits(model), threshold, two_sided=True)


def cooks_threshold(model: LinearSolution, type: int = 1) -> float:
    """
    Cook's distance threshold.

    With k predictors:
        1: 4/n   2: 4/(n-k-1)   3: 1   4: 1/(n-k-1)   5: 3 mean(D)
    """
    check_choice(type, COOKS_THRESHOLD_TYPES, 'type')
    n = model.n
    k = model.n_coefficients - 1
    if type in (2, 4) and n - k - 1 <= 0:
        raise NotComputableError(
            f"cooks_distance: requires positive degrees of freedom, got {n - k - 1}",
            criterion='cooks_distance',
            df=n - k - 1,
        )
    if type == 1:
        return 4.0 / n
    if type == 2:
        return 4.0 / (n - k - 1)
    if type == 3:
        return 1.0
    if type == 4:
        return 1.0 / (n - k - 1)
    return 3.0 * float(np.mean(cooks_distance(model)))


def cooks_d_plot_data(model: LinearSolution, type: int = 1) -> ThresholdPlotData:
    """Cook's distance per observation; outliers are D >= threshold."""
    threshold = cooks_threshold(model, type)
    return _threshold_data('cooks_distance', cooks_distance(model), threshold, two_sided=False)


def dfbetas_plot_data(model: LinearSolution) -> dict[str, ThresholdPlotData]:
    """DFBETAS per coefficient, threshold 2/sqrt(n)."""
    values = dfbetas(model)
    threshold = 2.0 / np.sqrt(model.n)
    return {
        name: _threshold_data(f"dfbetas[{name}]", values[:, j], threshold, two_sided=True)
        for j, name in enumerate(model.coefficient_names)
    }


def deleted_studentized_fitted_data(
    model: LinearSolution,
    threshold: float = 2.0,
) -> ThresholdPlotData:
    """Deleted studentized residuals against fitted values."""
    return _threshold_data(
        'rstudent', rstudent(model), threshold, two_sided=True,
        fitted=model.fitted_values,
    )


def studentized_residual_data(model: LinearSolution, threshold: float = 3.0) -> ThresholdPlotData:
    """Deleted studentized residuals by observation."""
    return _threshold_data('rstudent', rstudent(model), threshold, two_sided=True)


def standardized_residual_chart_data(
    model: LinearSolution,
    threshold: float = 2.0,
) -> ThresholdPlotData:
    """Standardized residuals by observation."""
    return _threshold_data('rstandard', rstandard(model), threshold, two_sided=True)


def rstudent_leverage_data(model: LinearSolution, threshold: float = 2.0) -> LeveragePlotData:
    """
    Classify observations by leverage and deleted studentized residual.

    Leverage threshold is 2p/n. An observation is an outlier when
    |rstudent| > threshold and a leverage point when h > 2p/n; values
    equal to a threshold are not flagged.
    """
    lev = model.leverage
    rst = rstudent(model)
    lev_threshold = 2.0 * model.n_coefficients / model.n

    high_lev = lev > lev_threshold
    outlying = np.abs(rst) > threshold
    classes = np.where(
        high_lev & outlying, LEVERAGE_CLASSES[3],
        np.where(outlying, LEVERAGE_CLASSES[2],
                 np.where(high_lev, LEVERAGE_CLASSES[1], LEVERAGE_CLASSES[0])),
    )
    return LeveragePlotData(
        observation=_observations(model.n),
        leverage=lev,
        rstudent=rst,
        classification=tuple(str(c) for c in classes),
        leverage_threshold=lev_threshold,
        rstudent_threshold=float(threshold),
    )


def potential_residual_data(model: LinearSolution) -> dict[str, NDArray[np.floating[Any]]]:
    """Hadi's residual component against its potential component."""
    measure = hadi(model)
    return {'residual': measure.residual, 'potential': measure.potential}


def residual_qq_data(model: LinearSolution) -> QQPlotData:
    """
    Normal Q-Q plot data.

    The reference line passes through the first and third quartiles of
    the residuals and of the standard normal.
    """
    resid = model.residuals
    n = len(resid)
    a = 3.0 / 8.0 if n <= 10 else 0.5
    probs = (np.arange(1, n + 1) - a) / (n + 1 - 2 * a)

    y_q = np.quantile(resid, [0.25, 0.75])
    x_q = sp_stats.norm.ppf([0.25, 0.75])
    slope = float((y_q[1] - y_q[0]) / (x_q[1] - x_q[0]))
    intercept = float(y_q[0] - slope * x_q[0])

    return QQPlotData(
        theoretical=sp_stats.norm.ppf(probs),
        sample=np.sort(resid),
        slope=slope,
        intercept=intercept,
    )
