"""
Tests for the select() dispatcher.
"""

import pytest

from pyolsbuild.core.exceptions import ConfigurationError, ValidationError
from pyolsbuild.selection import (
    SelectionSolution,
    SubsetSolution,
    select,
    step_backward,
    step_forward,
)


class TestSelect:

    def test_forward_matches_step_forward(self, mtcars_full):
        via_select = select(mtcars_full, direction='forward')
        direct = step_forward(mtcars_full)
        assert isinstance(via_select, SelectionSolution)
        assert via_select.predictors == direct.predictors
        assert via_select.removal_alpha is None

    def test_backward_ignores_entry_alpha(self, mtcars_full):
        via_select = select(mtcars_full, direction='backward', entry_alpha=0.5)
        assert via_select.entry_alpha is None
        assert via_select.predictors == step_backward(mtcars_full).predictors

    def test_both(self, mtcars_full):
        result = select(mtcars_full, direction='both', criterion='aic')
        assert result.direction == 'both'
        assert result.criterion == 'aic'

    def test_exhaustive(self, mtcars_full):
        result = select(mtcars_full, direction='exhaustive', max_order=3)
        assert isinstance(result, SubsetSolution)
        assert result.kind == 'all_possible'
        assert result.n_models == 14

    def test_best_subset(self, mtcars_full):
        result = select(mtcars_full, direction='best-subset', metric='sbc')
        assert result.kind == 'best_subset'
        assert result.metric == 'sbc'

    def test_unknown_direction(self, mtcars_full):
        with pytest.raises(ConfigurationError, match="direction"):
            select(mtcars_full, direction='sideways')

    def test_unknown_criterion(self, mtcars_full):
        with pytest.raises(ConfigurationError, match="criterion"):
            select(mtcars_full, direction='forward', criterion='cp')

    @pytest.mark.parametrize("direction", ["backward", "both", "exhaustive"])
    def test_hierarchical_only_forward(self, mtcars_full, direction):
        with pytest.raises(ConfigurationError, match="hierarchical"):
            select(mtcars_full, direction=direction, hierarchical=True)

    def test_requires_fitted_model(self, mtcars_source):
        with pytest.raises(ValidationError):
            select(mtcars_source, direction='forward')
