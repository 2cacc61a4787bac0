"""
Residual normality tests.

test_normality() runs the olsrr battery on a model's residuals (or any
numeric vector): Shapiro-Wilk, Kolmogorov-Smirnov against a normal with
the sample mean and sd, and the composite Cramér-von Mises and
Anderson-Darling tests with the Stephens p-value approximations used by
R's nortest package.

test_correlation() is the correlation between the sorted residuals and
their expected values under normality.
"""

from __future__ import annotations

import math
import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from pyolsbuild.core.compute.timing import Timer
from pyolsbuild.core.result import Result
from pyolsbuild.core.validation import check_1d, check_array, check_finite, check_min_samples
from pyolsbuild.diagnostics._common import NormalityParams, NormalityRow
from pyolsbuild.diagnostics.solution import NormalitySolution
from pyolsbuild.regression.solution import LinearSolution


def _as_residuals(model_or_residuals: LinearSolution | ArrayLike) -> NDArray[np.floating[Any]]:
    if isinstance(model_or_residuals, LinearSolution):
        return model_or_residuals.residuals
    x = check_array(model_or_residuals, 'y')
    check_1d(x, 'y')
    check_finite(x, 'y')
    return x


def cramer_von_mises(x: NDArray[np.floating[Any]]) -> tuple[float, float]:
    """
    Composite Cramér-von Mises test for normality.

    Returns:
        (W, p-value); the p-value uses the modified statistic
        W (1 + 0.5/n).
    """
    n = len(x)
    z = np.sort(x)
    p = sp_stats.norm.cdf((z - z.mean()) / z.std(ddof=1))
    w = 1.0 / (12 * n) + float(np.sum((p - (2 * np.arange(1, n + 1) - 1) / (2 * n)) ** 2))
    ww = (1.0 + 0.5 / n) * w

    if ww < 0.0275:
        p_value = 1 - math.exp(-13.953 + 775.5 * ww - 12542.61 * ww ** 2)
    elif ww < 0.051:
        p_value = 1 - math.exp(-5.903 + 179.546 * ww - 1515.29 * ww ** 2)
    elif ww < 0.092:
        p_value = math.exp(0.886 - 31.62 * ww + 10.897 * ww ** 2)
    elif ww < 1.1:
        p_value = math.exp(1.111 - 34.242 * ww + 12.832 * ww ** 2)
    else:
        warnings.warn(
            "Cramer-von Mises p-value is smaller than 7.37e-10, "
            "cannot be computed more accurately",
            RuntimeWarning,
            stacklevel=2,
        )
        p_value = 7.37e-10
    return w, p_value


def anderson_darling(x: NDArray[np.floating[Any]]) -> tuple[float, float]:
    """
    Composite Anderson-Darling test for normality.

    Returns:
        (A, p-value); the p-value uses the modified statistic
        A (1 + 0.75/n + 2.25/n²).
    """
    n = len(x)
    z = (np.sort(x) - x.mean()) / x.std(ddof=1)
    log_p1 = sp_stats.norm.logcdf(z)
    log_p2 = sp_stats.norm.logcdf(-z)
    h = (2 * np.arange(1, n + 1) - 1) * (log_p1 + log_p2[::-1])
    a = -n - float(np.mean(h))
    aa = (1.0 + 0.75 / n + 2.25 / n ** 2) * a

    if aa < 0.2:
        p_value = 1 - math.exp(-13.436 + 101.14 * aa - 223.73 * aa ** 2)
    elif aa < 0.34:
        p_value = 1 - math.exp(-8.318 + 42.796 * aa - 59.938 * aa ** 2)
    elif aa < 0.6:
        p_value = math.exp(0.9177 - 4.279 * aa - 1.38 * aa ** 2)
    elif aa < 10:
        p_value = math.exp(1.2937 - 5.709 * aa + 0.0186 * aa ** 2)
    else:
        p_value = 3.7e-24
    return a, p_value


def test_normality(model_or_residuals: LinearSolution | ArrayLike) -> NormalitySolution:
    """
    Test residuals for normality.

    Args:
        model_or_residuals: A fitted model (its residuals are tested) or
            a numeric vector of at least 8 values.

    Returns:
        NormalitySolution with rows 'Shapiro-Wilk', 'Kolmogorov-Smirnov',
        'Cramer-von Mises', 'Anderson-Darling'.
    """
    x = _as_residuals(model_or_residuals)
    check_min_samples(x, 8, 'residuals')

    timer = Timer()
    timer.start()

    with timer.section('tests'):
        sw = sp_stats.shapiro(x)
        ks = sp_stats.kstest(x, 'norm', args=(x.mean(), x.std(ddof=1)))
        cvm_w, cvm_p = cramer_von_mises(x)
        ad_a, ad_p = anderson_darling(x)

    timer.stop()

    rows = (
        NormalityRow('Shapiro-Wilk', float(sw.statistic), float(sw.pvalue)),
        NormalityRow('Kolmogorov-Smirnov', float(ks.statistic), float(ks.pvalue)),
        NormalityRow('Cramer-von Mises', cvm_w, cvm_p),
        NormalityRow('Anderson-Darling', ad_a, ad_p),
    )
    return NormalitySolution(_result=Result(
        params=NormalityParams(rows=rows, n=len(x)),
        info={'n': len(x)},
        timing=timer.result(),
        backend_name='cpu',
    ))


# Not a pytest test despite the name.
test_normality.__test__ = False


def test_correlation(model: LinearSolution) -> float:
    """
    Correlation between observed residuals and expected residuals
    under normality.

    Expected values are s · Φ⁻¹((k - 0.375) / (n + 0.25)), k = 1..n,
    with s the residual standard error.
    """
    n = model.n
    k = np.arange(1, n + 1)
    expected = model.residual_std_error * sp_stats.norm.ppf((k - 0.375) / (n + 0.25))
    observed = np.sort(model.residuals)
    return float(np.corrcoef(expected, observed)[0, 1])


test_correlation.__test__ = False
