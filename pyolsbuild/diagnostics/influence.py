"""
Influence measures for a fitted OLS model.

All functions take a LinearSolution and return per-observation arrays
(dfbetas returns an n x p matrix). Formulas follow R's stats influence
functions and olsrr:

    rstandard   e_i / (s sqrt(1 - h_i))
    rstudent    e_i / (s_(i) sqrt(1 - h_i))
    cooks       r_i² h_i / (p (1 - h_i))
    dffits      t_i sqrt(h_i / (1 - h_i))
    dfbetas     (X'X)⁻¹ x_i e_i / (1 - h_i), scaled by s_(i) sqrt((X'X)⁻¹_jj)

where s_(i) is the residual standard error with observation i deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyolsbuild.core.exceptions import NotComputableError
from pyolsbuild.diagnostics.criteria import press, pred_rsq
from pyolsbuild.regression.solution import LinearSolution

__all__ = [
    "HadiMeasure",
    "leverage",
    "press",
    "pred_rsq",
    "hadi",
    "rstandard",
    "rstudent",
    "cooks_distance",
    "dffits",
    "dfbetas",
]


@dataclass(frozen=True)
class HadiMeasure:
    """Hadi's influence measure and its two components."""
    potential: NDArray[np.floating[Any]]
    residual: NDArray[np.floating[Any]]

    @property
    def hadi(self) -> NDArray[np.floating[Any]]:
        return self.potential + self.residual


def _one_minus_h(model: LinearSolution, measure: str) -> NDArray[np.floating[Any]]:
    denom = 1.0 - model.leverage
    if np.any(denom <= 0):
        raise NotComputableError(
            f"{measure}: an observation has leverage 1",
            criterion=measure,
        )
    return denom


def leverage(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """Diagonal of the hat matrix."""
    return model.leverage.copy()


def hadi(model: LinearSolution) -> HadiMeasure:
    """
    Hadi's measure of influence.

    potential = h / (1 - h)
    residual  = p / (1 - h) · d² / (1 - d²),  d = e / sqrt(SSE)
    """
    one_minus_h = _one_minus_h(model, 'hadi')
    if model.rss <= 0:
        raise NotComputableError("hadi: residual sum of squares is zero", criterion='hadi')

    d2 = model.residuals ** 2 / model.rss
    potential = model.leverage / one_minus_h
    residual = (model.n_coefficients / one_minus_h) * (d2 / (1.0 - d2))
    return HadiMeasure(potential=potential, residual=residual)


def rstandard(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """Internally studentized (standardized) residuals."""
    one_minus_h = _one_minus_h(model, 'rstandard')
    return model.residuals / (model.residual_std_error * np.sqrt(one_minus_h))


def _deleted_sigma(model: LinearSolution) -> NDArray[np.floating[Any]]:
    one_minus_h = _one_minus_h(model, 'rstudent')
    df = model.df_residual - 1
    if df <= 0:
        raise NotComputableError(
            f"rstudent: requires positive degrees of freedom, got {df}",
            criterion='rstudent',
            df=df,
        )
    s2 = (model.rss - model.residuals ** 2 / one_minus_h) / df
    return np.sqrt(s2)


def rstudent(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """Externally studentized (deleted studentized) residuals."""
    one_minus_h = _one_minus_h(model, 'rstudent')
    return model.residuals / (_deleted_sigma(model) * np.sqrt(one_minus_h))


def cooks_distance(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """Cook's distance."""
    one_minus_h = _one_minus_h(model, 'cooks_distance')
    r = rstandard(model)
    return (r ** 2) * model.leverage / (model.n_coefficients * one_minus_h)


def dffits(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """Scaled difference in fitted value when observation i is deleted."""
    one_minus_h = _one_minus_h(model, 'dffits')
    return rstudent(model) * np.sqrt(model.leverage / one_minus_h)


def dfbetas(model: LinearSolution) -> NDArray[np.floating[Any]]:
    """
    Scaled change in each coefficient when observation i is deleted.

    Returns:
        Array of shape (n, p), columns in coefficient_names order.
    """
    one_minus_h = _one_minus_h(model, 'dfbetas')
    X = model.design.X
    xtx_inv = model.xtx_inv

    dfbeta = (X @ xtx_inv) * (model.residuals / one_minus_h)[:, np.newaxis]
    scale = np.outer(_deleted_sigma(model), np.sqrt(np.diag(xtx_inv)))
    return dfbeta / scale
