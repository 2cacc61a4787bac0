"""
Common types for regression diagnostics.

Parameter payloads of the diagnostic tests. Each is wrapped in a
Result[P] and exposed through the matching solution class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

VALID_P_ADJUST = ("none", "bonferroni", "sidak", "holm")


@dataclass(frozen=True)
class HeteroskedasticityParams:
    """
    Parameter payload for the Breusch-Pagan and score tests.

    Attributes
    ----------
    method : str
        "Breusch Pagan Test for Heteroskedasticity" or
        "Score Test for Heteroskedasticity".
    labels : tuple of str
        One label per statistic. In multiple mode these are the tested
        variables followed by "simultaneous".
    statistics : tuple of float
        Chi-squared statistics, aligned with ``labels``.
    df : tuple of int
        Degrees of freedom, aligned with ``labels``.
    p_values : tuple of float
        (Adjusted) p-values, aligned with ``labels``.
    variables : tuple of str
        Regressors of the auxiliary model (or "fitted values of <y>").
    fitted_values, rhs, multiple : bool
        The test configuration actually used.
    p_adjust : str
        Adjustment applied to the individual p-values.
    """
    method: str
    labels: tuple[str, ...]
    statistics: tuple[float, ...]
    df: tuple[int, ...]
    p_values: tuple[float, ...]
    variables: tuple[str, ...]
    fitted_values: bool
    rhs: bool
    multiple: bool
    p_adjust: str


@dataclass(frozen=True)
class NormalityRow:
    """One goodness-of-fit test against the normal distribution."""
    test: str
    statistic: float
    p_value: float


@dataclass(frozen=True)
class NormalityParams:
    """Parameter payload for the residual normality test battery."""
    rows: tuple[NormalityRow, ...]
    n: int


@dataclass(frozen=True)
class CorrelationParams:
    """
    Zero-order, partial and part correlations of each predictor.

    Arrays are aligned with ``predictors``.
    """
    predictors: tuple[str, ...]
    zero_order: NDArray[np.floating[Any]]
    partial: NDArray[np.floating[Any]]
    part: NDArray[np.floating[Any]]
