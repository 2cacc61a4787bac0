"""
p-value adjustment for the per-variable Breusch-Pagan tests.

Implements the four methods of olsrr's score tests: none, bonferroni,
sidak, holm. Holm's adjustment is the single-step form olsrr uses (sorted
p-values scaled by the number of remaining hypotheses, capped at 1, with
no monotonicity pass), so results match olsrr rather than R's p.adjust().
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray, ArrayLike

from pyolsbuild.core.exceptions import ConfigurationError

VALID_METHODS = ("none", "bonferroni", "sidak", "holm")


def p_adjust(
    p: ArrayLike,
    method: str = "none",
    n: int | None = None,
) -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons.

    Parameters
    ----------
    p : array-like
        Vector of p-values.
    method : str
        One of "none" (default), "bonferroni", "sidak", "holm".
    n : int or None
        Number of comparisons. Default len(p).

    Returns
    -------
    ndarray
        Adjusted p-values, same length and order as input, clipped to [0, 1].
    """
    if method not in VALID_METHODS:
        raise ConfigurationError(
            f"p_adjust: method must be one of {VALID_METHODS}, got {method!r}"
        )

    p_arr = np.asarray(p, dtype=np.float64).ravel()
    n_tests = len(p_arr) if n is None else n

    if len(p_arr) == 0 or method == "none":
        return p_arr.copy()

    if method == "bonferroni":
        return np.minimum(1.0, p_arr * n_tests)

    if method == "sidak":
        return np.minimum(1.0, 1.0 - (1.0 - p_arr) ** n_tests)

    # holm
    order = np.argsort(p_arr, kind="stable")
    multipliers = np.arange(len(p_arr), 0, -1, dtype=np.float64)
    adjusted = np.empty_like(p_arr)
    adjusted[order] = np.minimum(1.0, p_arr[order] * multipliers)
    return adjusted
