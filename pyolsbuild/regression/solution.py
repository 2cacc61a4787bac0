"""
Regression solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyolsbuild.core.result import Result

if TYPE_CHECKING:
    from pyolsbuild.regression.design import RegressionDesign


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends.

    ``effects`` is Q'y from the QR factorisation; its squared entries after
    the first are the sequential (Type I) sums of squares of the predictors
    in model order. ``leverage`` is the diagonal of the hat matrix.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    effects: NDArray[np.floating[Any]]
    leverage: NDArray[np.floating[Any]]
    xtx_inv: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int


@dataclass(frozen=True)
class AnovaRow:
    """One row of the sequential ANOVA table."""
    term: str
    df: int
    sum_sq: float
    mean_sq: float
    f_value: float | None    # None for Residuals row
    p_value: float | None    # None for Residuals row


@dataclass
class LinearSolution:
    """
    User-facing regression results.

    Wraps the backend Result and provides convenient accessors
    for all regression outputs including standard errors, p-values and
    the sequential ANOVA decomposition.
    """
    _result: Result[LinearParams]
    _design: 'RegressionDesign'

    # Cached computations
    _standard_errors: NDArray[np.floating[Any]] | None = None
    _t_statistics: NDArray[np.floating[Any]] | None = None

    @property
    def design(self) -> 'RegressionDesign':
        return self._design

    @property
    def n(self) -> int:
        return self._design.n

    @property
    def n_coefficients(self) -> int:
        """Number of coefficients, intercept included."""
        return len(self.coefficients)

    @property
    def predictors(self) -> tuple[str, ...]:
        return self._design.predictors

    @property
    def response(self) -> str:
        return self._design.response

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        return self._design.coefficient_names

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def coefficient_dict(self) -> dict[str, float]:
        return dict(zip(self.coefficient_names, self.coefficients.tolist()))

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def leverage(self) -> NDArray[np.floating[Any]]:
        return self._result.params.leverage

    @property
    def xtx_inv(self) -> NDArray[np.floating[Any]]:
        """Unscaled covariance matrix (X'X)⁻¹."""
        return self._result.params.xtx_inv

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def mse(self) -> float:
        """Residual mean square, SSE / df_residual."""
        df = self.df_residual
        if df <= 0:
            return float('nan')
        return self.rss / df

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        p = self._result.params.rank
        if n - p <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (n - 1) / (n - p)

    @property
    def residual_std_error(self) -> float:
        df = self._result.params.df_residual
        if df <= 0:
            return 0.0
        return float(np.sqrt(self.rss / df))

    @property
    def rmse(self) -> float:
        """Root mean squared error, reported as the residual standard error."""
        return self.residual_std_error

    @property
    def log_likelihood(self) -> float:
        """Gaussian log-likelihood at the ML variance estimate SSE/n."""
        n = self._design.n
        return float(-0.5 * n * (np.log(2 * np.pi) + 1.0 - np.log(n) + np.log(self.rss)))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        Computed as SE(β) = sqrt(diag(σ² (X'X)⁻¹)). NaN when the model
        leaves no residual degrees of freedom.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        df = self._result.params.df_residual
        p = len(self.coefficients)
        if df <= 0:
            self._standard_errors = np.full(p, np.nan, dtype=np.float64)
            return self._standard_errors

        sigma_sq = self.rss / df
        self._standard_errors = np.sqrt(sigma_sq * np.diag(self._result.params.xtx_inv))
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients."""
        if self._t_statistics is not None:
            return self._t_statistics

        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
            t = np.where(np.isfinite(t), t, np.nan)
        self._t_statistics = t
        return self._t_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values of the coefficient t-tests."""
        df = self.df_residual
        t = self.t_statistics
        if df <= 0:
            return np.full_like(t, np.nan)
        return 2.0 * sp_stats.t.sf(np.abs(t), df)

    def p_value(self, name: str) -> float:
        """p-value of a single coefficient, by predictor name."""
        idx = self.coefficient_names.index(name)
        return float(self.p_values[idx])

    def anova(self) -> tuple[AnovaRow, ...]:
        """
        Sequential (Type I) ANOVA table, predictors in model order.

        Matches R's anova(lm(...)) for numeric predictors: one row per
        predictor followed by the Residuals row.
        """
        effects = self._result.params.effects
        df_res = self.df_residual
        mse = self.mse
        rows = []
        for j, name in enumerate(self.predictors, start=1):
            ss = float(effects[j] ** 2)
            if df_res > 0 and mse > 0:
                f_val = ss / mse
                p_val = float(sp_stats.f.sf(f_val, 1, df_res))
            else:
                f_val, p_val = None, None
            rows.append(AnovaRow(term=name, df=1, sum_sq=ss, mean_sq=ss,
                                 f_value=f_val, p_value=p_val))
        rows.append(AnovaRow(term='Residuals', df=df_res, sum_sq=self.rss,
                             mean_sq=mse, f_value=None, p_value=None))
        return tuple(rows)

    @property
    def f_statistic(self) -> float:
        """Overall F statistic against the intercept-only model."""
        k = self.n_coefficients - 1
        if k == 0 or self.df_residual <= 0 or self.rss == 0:
            return float('nan')
        return ((self.tss - self.rss) / k) / self.mse

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Generate R-style summary output."""
        lines = [
            "Linear Regression Results",
            "=" * 72,
            f"Response: {self.response}",
            f"Observations: {self.n}",
            f"Predictors: {len(self.predictors)}",
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {self.adjusted_r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            "Coefficients:",
            "-" * 72,
            f"{'':<16} {'Estimate':>14} {'Std.Error':>12} {'t value':>10} {'Pr(>|t|)':>12}",
            "-" * 72,
        ]

        for name, coef, se, t, pv in zip(
            self.coefficient_names, self.coefficients, self.standard_errors,
            self.t_statistics, self.p_values,
        ):
            se_str = f"{se:12.6f}" if not np.isnan(se) else "          NA"
            t_str = f"{t:10.3f}" if not np.isnan(t) else "        NA"
            p_str = f"{pv:12.4e}" if not np.isnan(pv) else "          NA"
            lines.append(f"{name:<16} {coef:14.6f} {se_str} {t_str} {p_str}")

        lines.append("-" * 72)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(response={self.response!r}, "
            f"predictors={list(self.predictors)}, n={self.n}, "
            f"r_squared={self.r_squared:.4f})"
        )
