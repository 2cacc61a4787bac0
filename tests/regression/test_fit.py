"""
Tests for regression fit().

Tests the complete pipeline: Design construction, backend selection,
and solution properties. Reference values are from R:

    > summary(lm(mpg ~ wt, mtcars))
    > anova(lm(mpg ~ wt + hp, mtcars))
"""

import pytest
import numpy as np

from pyolsbuild.core.exceptions import SingularMatrixError, ValidationError
from pyolsbuild.regression import INTERCEPT, RegressionDesign, fit
from pyolsbuild.regression.solution import LinearSolution

# R: coef(lm(mpg ~ wt, mtcars))
R_WT_COEF = [37.285126, -5.344472]
R_WT_RSQ = 0.7528328
R_WT_SIGMA = 3.045882
R_WT_LOGLIK = -80.01471

# R: coef(lm(mpg ~ wt + hp, mtcars))
R_WT_HP_COEF = [37.22727012, -3.87783074, -0.03177295]
R_WT_HP_RSQ = 0.8267855
R_WT_HP_ANOVA_SS = [847.72525, 83.27418, 195.04775]


class TestFitBasic:
    """Basic fit() functionality tests."""

    def test_fit_from_arrays(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        assert isinstance(result, LinearSolution)
        assert result.coefficients.shape == (4,)
        assert result.coefficient_names == (INTERCEPT, 'x1', 'x2', 'x3')

    def test_fit_from_design(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = RegressionDesign.from_arrays(X, y, names=['a', 'b', 'c'])
        result = fit(design)
        assert result.predictors == ('a', 'b', 'c')

    def test_fit_requires_y_with_arrays(self, simple_regression_data):
        X, _, _ = simple_regression_data
        with pytest.raises(ValueError, match="y required"):
            fit(X)

    def test_fit_rejects_y_with_design(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = RegressionDesign.from_arrays(X, y)
        with pytest.raises(ValueError):
            fit(design, y)

    def test_unknown_backend(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with pytest.raises(ValueError, match="Unknown backend"):
            fit(X, y, backend='gpu')

    def test_coefficients_close_to_truth(self, simple_regression_data):
        X, y, beta_true = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(result.coefficients[1:], beta_true, atol=0.1)
        np.testing.assert_allclose(result.coefficients[0], 3.0, atol=0.1)

    def test_residuals_sum_to_near_zero(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        assert abs(result.residuals.sum()) < 1e-10

    def test_collinear_design_raises(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularMatrixError):
            fit(X, y)

    def test_nan_rejected(self, simple_regression_data):
        X, y, _ = simple_regression_data
        y = y.copy()
        y[3] = np.nan
        with pytest.raises(ValidationError):
            fit(X, y)


class TestMtcarsReference:
    """Agreement with R's lm() on mtcars."""

    def test_mpg_on_wt(self, mtcars_source):
        result = fit(RegressionDesign.from_datasource(mtcars_source, x='wt', y='mpg'))
        np.testing.assert_allclose(result.coefficients, R_WT_COEF, rtol=1e-6)
        np.testing.assert_allclose(result.r_squared, R_WT_RSQ, rtol=1e-6)
        np.testing.assert_allclose(result.residual_std_error, R_WT_SIGMA, rtol=1e-6)
        np.testing.assert_allclose(result.log_likelihood, R_WT_LOGLIK, rtol=1e-6)
        assert result.df_residual == 30

    def test_mpg_on_wt_hp(self, mtcars_source):
        result = fit(RegressionDesign.from_datasource(mtcars_source, x=['wt', 'hp'], y='mpg'))
        np.testing.assert_allclose(result.coefficients, R_WT_HP_COEF, rtol=1e-6)
        np.testing.assert_allclose(result.r_squared, R_WT_HP_RSQ, rtol=1e-6)

    def test_sequential_anova(self, mtcars_source):
        result = fit(RegressionDesign.from_datasource(mtcars_source, x=['wt', 'hp'], y='mpg'))
        table = result.anova()
        assert [row.term for row in table] == ['wt', 'hp', 'Residuals']
        np.testing.assert_allclose([row.sum_sq for row in table], R_WT_HP_ANOVA_SS, rtol=1e-5)
        assert table[-1].df == 29

    def test_default_predictors_are_other_columns(self, mtcars_source):
        design = RegressionDesign.from_datasource(mtcars_source, y='mpg')
        assert design.predictors == mtcars_source.columns[1:]


class TestFitProperties:
    """Derived properties of LinearSolution."""

    def test_standard_errors_positive(self, simple_regression_data):
        X, y, _ = simple_regression_data
        se = fit(X, y).standard_errors
        assert np.all(se > 0)
        assert np.all(np.isfinite(se))

    def test_p_values_in_zero_one(self, simple_regression_data):
        X, y, _ = simple_regression_data
        pv = fit(X, y).p_values
        assert np.all((pv >= 0.0) & (pv <= 1.0))

    def test_p_value_by_name(self, mtcars_full):
        idx = mtcars_full.coefficient_names.index('wt')
        assert mtcars_full.p_value('wt') == pytest.approx(mtcars_full.p_values[idx])

    def test_leverage_sums_to_p(self, mtcars_full):
        np.testing.assert_allclose(mtcars_full.leverage.sum(), mtcars_full.n_coefficients)

    def test_xtx_inv_matches_direct_inverse(self, mtcars_full):
        X = mtcars_full.design.X
        np.testing.assert_allclose(mtcars_full.xtx_inv, np.linalg.inv(X.T @ X), rtol=1e-8)

    def test_summary_mentions_predictors(self, mtcars_full):
        text = mtcars_full.summary()
        for name in ('disp', 'hp', 'wt', 'qsec', 'Pr(>|t|)'):
            assert name in text


class TestDesignSubset:

    def test_subset_shares_columns(self, mtcars_full):
        design = mtcars_full.design
        sub = design.subset(['wt', 'hp'])
        assert sub.predictors == ('wt', 'hp')
        assert sub.X.shape == (32, 3)
        assert sub.column('wt') is design.column('wt')

    def test_empty_subset_is_intercept_only(self, mtcars_full):
        sub = mtcars_full.design.subset([])
        result = fit(sub)
        np.testing.assert_allclose(result.coefficients, [20.090625])
        assert result.r_squared == pytest.approx(0.0, abs=1e-12)

    def test_unknown_predictor(self, mtcars_full):
        with pytest.raises(KeyError, match="cyl"):
            mtcars_full.design.subset(['cyl'])
