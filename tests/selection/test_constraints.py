"""
Tests for include/exclude constraint resolution.
"""

import pytest

from pyolsbuild.core.exceptions import ConfigurationError
from pyolsbuild.selection import ConstraintSet

ORDER = ('disp', 'hp', 'wt', 'qsec')


class TestBuild:

    def test_names(self):
        c = ConstraintSet.build(ORDER, include=['wt'], exclude='disp')
        assert c.included == frozenset({'wt'})
        assert c.excluded == frozenset({'disp'})

    def test_indices_are_zero_based(self):
        c = ConstraintSet.build(ORDER, include=[3], exclude=0)
        assert c.included == frozenset({'qsec'})
        assert c.excluded == frozenset({'disp'})

    def test_mixed_names_and_indices(self):
        c = ConstraintSet.build(ORDER, include=['hp', 2])
        assert c.included_ordered == ('hp', 'wt')

    def test_index_out_of_range(self):
        with pytest.raises(ConfigurationError, match="out of range"):
            ConstraintSet.build(ORDER, include=[4])

    def test_negative_index_rejected(self):
        with pytest.raises(ConfigurationError):
            ConstraintSet.build(ORDER, exclude=[-1])

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="cyl"):
            ConstraintSet.build(ORDER, include=['cyl'])

    def test_bool_rejected(self):
        with pytest.raises(ConfigurationError):
            ConstraintSet.build(ORDER, include=[True])

    def test_overlap(self):
        with pytest.raises(ConfigurationError, match="both included and excluded"):
            ConstraintSet.build(ORDER, include=['wt'], exclude=[2])


class TestViews:

    @pytest.fixture
    def constraints(self):
        return ConstraintSet.build(ORDER, include=['qsec'], exclude=['hp'])

    def test_allowed_keeps_declared_order(self, constraints):
        assert constraints.allowed == ('disp', 'wt', 'qsec')

    def test_free(self, constraints):
        assert constraints.free == ('disp', 'wt')

    def test_ordered(self, constraints):
        assert constraints.ordered(['qsec', 'disp', 'wt']) == ('disp', 'wt', 'qsec')

    def test_admits(self, constraints):
        assert constraints.admits(['qsec', 'wt'])
        assert not constraints.admits(['wt'])
        assert not constraints.admits(['qsec', 'hp'])

    def test_empty_constraints(self):
        c = ConstraintSet.build(ORDER)
        assert c.free == ORDER
        assert c.included_ordered == ()
