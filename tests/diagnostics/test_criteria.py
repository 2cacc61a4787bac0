"""
Tests for model selection criteria.

Reference values from R:

    > m <- lm(mpg ~ wt, mtcars)
    > logLik(m); AIC(m); BIC(m)
"""

import math

import numpy as np
import pytest

from pyolsbuild.core.exceptions import NotComputableError
from pyolsbuild.diagnostics import (
    aic,
    apc,
    coefficient_p_value,
    fpe,
    hsp,
    log_likelihood,
    mallows_cp,
    model_metrics,
    msep,
    pred_rsq,
    press,
    sbc,
    sbic,
)
from pyolsbuild.regression import fit

R_WT_AIC = 166.0294
R_WT_BIC = 170.4266


@pytest.fixture
def wt_model(mtcars_full):
    return fit(mtcars_full.design.subset(['wt']))


@pytest.fixture
def saturated_model():
    """Three observations, two predictors: no residual degrees of freedom."""
    X = np.array([[1.0, 0.0], [0.0, 1.0], [2.0, 3.0]])
    y = np.array([1.0, 2.0, 4.0])
    return fit(X, y)


class TestInformationCriteria:

    def test_aic_matches_r(self, wt_model):
        assert aic(wt_model) == pytest.approx(R_WT_AIC, abs=1e-4)

    def test_sbc_matches_r_bic(self, wt_model):
        assert sbc(wt_model) == pytest.approx(R_WT_BIC, abs=1e-4)

    def test_stata_drops_sigma_parameter(self, wt_model):
        assert aic(wt_model, method='STATA') == pytest.approx(aic(wt_model) - 2.0)
        assert sbc(wt_model, method='STATA') == pytest.approx(
            sbc(wt_model) - math.log(wt_model.n)
        )

    def test_sas_formula(self, wt_model):
        n, p, sse = wt_model.n, wt_model.n_coefficients, wt_model.rss
        assert aic(wt_model, method='SAS') == pytest.approx(n * math.log(sse / n) + 2 * p)
        assert sbc(wt_model, method='SAS') == pytest.approx(
            n * math.log(sse / n) + math.log(n) * p
        )

    def test_sas_corrected(self, wt_model):
        n, p, sse = wt_model.n, wt_model.n_coefficients, wt_model.rss
        expected = n * math.log(sse / n) + n * (n + p) / (n - p - 2)
        assert aic(wt_model, method='SAS', corrected=True) == pytest.approx(expected)

    def test_unknown_method(self, wt_model):
        with pytest.raises(ValueError, match="method"):
            aic(wt_model, method='SPSS')

    def test_log_likelihood(self, wt_model):
        assert log_likelihood(wt_model) == pytest.approx(-80.01471, abs=1e-4)

    def test_aic_prefers_better_model(self, wt_model, mtcars_full):
        wt_hp = fit(mtcars_full.design.subset(['wt', 'hp']))
        assert aic(wt_hp) < aic(wt_model)


class TestFullModelCriteria:

    def test_cp_of_full_model_equals_p(self, mtcars_full):
        assert mallows_cp(mtcars_full, mtcars_full) == pytest.approx(
            mtcars_full.n_coefficients
        )

    def test_cp_formula(self, wt_model, mtcars_full):
        expected = wt_model.rss / mtcars_full.mse - (wt_model.n - 2 * wt_model.n_coefficients)
        assert mallows_cp(wt_model, mtcars_full) == pytest.approx(expected)

    def test_sbic_formula(self, wt_model, mtcars_full):
        n, p, sse = wt_model.n, wt_model.n_coefficients, wt_model.rss
        q = n * mtcars_full.mse / sse
        expected = n * math.log(sse / n) + 2 * (p + 2) * q - 2 * q ** 2
        assert sbic(wt_model, mtcars_full) == pytest.approx(expected)


class TestPredictionCriteria:

    def test_msep(self, wt_model):
        n, p = wt_model.n, wt_model.n_coefficients
        expected = (n + 1) * (n - 2) * wt_model.rss / (n * (n - p - 1))
        assert msep(wt_model) == pytest.approx(expected)

    def test_fpe(self, wt_model):
        n, p = wt_model.n, wt_model.n_coefficients
        assert fpe(wt_model) == pytest.approx(wt_model.mse * (n + p) / n)

    def test_apc(self, wt_model):
        n, p = wt_model.n, wt_model.n_coefficients
        assert apc(wt_model) == pytest.approx((n + p) / (n - p) * (1 - wt_model.r_squared))

    def test_hsp(self, wt_model):
        n, p = wt_model.n, wt_model.n_coefficients
        assert hsp(wt_model) == pytest.approx(wt_model.mse / (n - p - 1))

    def test_press_by_leave_one_out(self, wt_model):
        X = wt_model.design.X
        y = wt_model.design.y
        total = 0.0
        for i in range(wt_model.n):
            keep = np.arange(wt_model.n) != i
            beta, *_ = np.linalg.lstsq(X[keep], y[keep], rcond=None)
            total += (y[i] - X[i] @ beta) ** 2
        assert press(wt_model) == pytest.approx(total, rel=1e-8)

    def test_pred_rsq_below_r_squared(self, wt_model):
        assert pred_rsq(wt_model) < wt_model.r_squared
        assert pred_rsq(wt_model) == pytest.approx(1 - press(wt_model) / wt_model.tss)


class TestNotComputable:

    def test_cp_without_residual_df(self, saturated_model):
        with pytest.raises(NotComputableError):
            mallows_cp(saturated_model, saturated_model)

    def test_msep_without_df(self, saturated_model):
        with pytest.raises(NotComputableError) as exc_info:
            msep(saturated_model)
        assert exc_info.value.criterion == 'msep'

    def test_coefficient_p_value_requires_df(self):
        with pytest.raises(NotComputableError):
            coefficient_p_value(1.0, 0.5, 0)

    def test_coefficient_p_value_requires_finite_se(self):
        with pytest.raises(NotComputableError):
            coefficient_p_value(1.0, float('nan'), 10)

    def test_coefficient_p_value_two_sided(self):
        assert coefficient_p_value(2.0, 1.0, 30) == pytest.approx(
            coefficient_p_value(-2.0, 1.0, 30)
        )


class TestModelMetrics:

    def test_all_metrics_finite(self, wt_model, mtcars_full):
        metrics, problems = model_metrics(wt_model, mtcars_full)
        assert problems == ()
        assert all(np.isfinite(v) for v in metrics.as_dict().values())
        assert metrics.rsquare == pytest.approx(wt_model.r_squared)
        assert metrics.aic == pytest.approx(aic(wt_model))

    def test_metric_names(self, wt_model, mtcars_full):
        metrics, _ = model_metrics(wt_model, mtcars_full)
        assert list(metrics.as_dict()) == [
            'rsquare', 'adjr', 'rmse', 'predrsq', 'cp', 'aic',
            'sbic', 'sbc', 'msep', 'fpe', 'apc', 'hsp',
        ]

    def test_method_is_forwarded(self, wt_model, mtcars_full):
        metrics, _ = model_metrics(wt_model, mtcars_full, method='SAS')
        assert metrics.aic == pytest.approx(aic(wt_model, method='SAS'))

    def test_raise_mode(self, saturated_model):
        with pytest.raises(NotComputableError):
            model_metrics(saturated_model, saturated_model)

    def test_nan_mode(self, saturated_model):
        metrics, problems = model_metrics(saturated_model, saturated_model, on_error='nan')
        assert np.isnan(metrics.cp)
        assert np.isnan(metrics.msep)
        assert len(problems) > 0
