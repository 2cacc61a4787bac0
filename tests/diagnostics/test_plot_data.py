"""
Tests for diagnostic plot data: thresholds and outlier flags.
"""

import numpy as np
import pytest

from pyolsbuild.core.exceptions import ConfigurationError
from pyolsbuild.diagnostics import cooks_distance, dffits, rstudent
from pyolsbuild.diagnostics.plot_data import (
    LEVERAGE_CLASSES,
    cooks_d_plot_data,
    cooks_threshold,
    deleted_studentized_fitted_data,
    dfbetas_plot_data,
    dffits_plot_data,
    potential_residual_data,
    residual_qq_data,
    rstudent_leverage_data,
    standardized_residual_chart_data,
    studentized_residual_data,
)


class TestThresholds:

    def test_dffits_size_adjusted(self, mtcars_five):
        data = dffits_plot_data(mtcars_five)
        assert data.threshold == pytest.approx(2 * np.sqrt(6 / 32))
        np.testing.assert_allclose(data.values, dffits(mtcars_five))

    def test_dffits_normal(self, mtcars_five):
        data = dffits_plot_data(mtcars_five, size_adjusted=False)
        assert data.threshold == pytest.approx(2 * np.sqrt(7 / 25))

    @pytest.mark.parametrize("type_, expected", [
        (1, 4 / 32),
        (2, 4 / 26),
        (3, 1.0),
        (4, 1 / 26),
    ])
    def test_cooks_threshold_types(self, mtcars_five, type_, expected):
        assert cooks_threshold(mtcars_five, type_) == pytest.approx(expected)

    def test_cooks_threshold_mean_based(self, mtcars_five):
        expected = 3 * cooks_distance(mtcars_five).mean()
        assert cooks_threshold(mtcars_five, 5) == pytest.approx(expected)

    def test_cooks_threshold_unknown_type(self, mtcars_five):
        with pytest.raises(ConfigurationError):
            cooks_threshold(mtcars_five, 6)

    def test_dfbetas_per_coefficient(self, mtcars_five):
        data = dfbetas_plot_data(mtcars_five)
        assert list(data) == list(mtcars_five.coefficient_names)
        for panel in data.values():
            assert panel.threshold == pytest.approx(2 / np.sqrt(32))


class TestOutlierFlags:

    def test_cooks_outliers_one_sided(self, mtcars_five):
        data = cooks_d_plot_data(mtcars_five)
        np.testing.assert_array_equal(data.outlier, data.values >= 4 / 32)
        assert data.observation[0] == 1
        assert data.observation[-1] == 32

    def test_outliers_pairs(self, mtcars_five):
        data = cooks_d_plot_data(mtcars_five)
        flagged = data.outliers
        assert len(flagged) == int(data.outlier.sum())
        for obs, value in flagged:
            assert value == pytest.approx(data.values[obs - 1])

    def test_two_sided_flags(self, mtcars_five):
        data = standardized_residual_chart_data(mtcars_five)
        np.testing.assert_array_equal(data.outlier, np.abs(data.values) >= 2.0)

    def test_deleted_studentized_carries_fitted(self, mtcars_five):
        data = deleted_studentized_fitted_data(mtcars_five)
        np.testing.assert_allclose(data.fitted, mtcars_five.fitted_values)
        assert 'fitted' in data.to_dict()

    def test_studentized_chart_threshold(self, mtcars_five):
        data = studentized_residual_data(mtcars_five)
        assert data.threshold == 3.0
        assert 'fitted' not in data.to_dict()

    def test_leverage_classes(self, mtcars_five):
        data = rstudent_leverage_data(mtcars_five)
        assert data.leverage_threshold == pytest.approx(2 * 6 / 32)
        rst = rstudent(mtcars_five)
        for h, r, cls in zip(data.leverage, rst, data.classification):
            assert cls in LEVERAGE_CLASSES
            assert ('leverage' in cls) == (h > data.leverage_threshold)
            assert ('outlier' in cls) == (abs(r) > 2.0)


class TestOtherPlots:

    def test_potential_residual(self, mtcars_five):
        data = potential_residual_data(mtcars_five)
        h = mtcars_five.leverage
        np.testing.assert_allclose(data['potential'], h / (1 - h))
        assert np.all(data['residual'] >= 0)

    def test_qq_line_through_quartiles(self, mtcars_five):
        data = residual_qq_data(mtcars_five)
        q1, q3 = np.quantile(mtcars_five.residuals, [0.25, 0.75])
        z = 0.6744897501960817
        assert data.intercept - data.slope * z == pytest.approx(q1)
        assert data.intercept + data.slope * z == pytest.approx(q3)
        assert np.all(np.diff(data.sample) >= 0)
        assert np.all(np.diff(data.theoretical) > 0)
