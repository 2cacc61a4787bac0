"""
Tests for stepwise selection.

mtcars reference (olsrr):

    > m <- lm(mpg ~ disp + hp + wt + qsec, mtcars)
    > ols_step_forward_p(m)      # enters wt, then hp
"""

import numpy as np
import pytest
from scipy import stats

from pyolsbuild.core.exceptions import ConfigurationError, DegenerateModelError, NotComputableError
from pyolsbuild.core.protocols import Reportable
from pyolsbuild.diagnostics import aic
from pyolsbuild.regression import RegressionDesign, fit
from pyolsbuild.selection import (
    ConstraintSet,
    CriterionStrategy,
    SearchState,
    make_criterion,
    step_backward,
    step_both,
    step_forward,
)
from pyolsbuild.selection._criteria import PValueCriterion
from pyolsbuild.selection._stepwise import StepwiseEngine


def _p_when_added(full, predictors, term):
    model = fit(full.design.subset(tuple(predictors) + (term,)))
    return model.p_value(term)


def _orthogonalize(v, *columns):
    """Residual of v after least squares on an intercept plus ``columns``."""
    A = np.column_stack([np.ones(len(v)), *columns])
    return v - A @ np.linalg.lstsq(A, v, rcond=None)[0]


@pytest.fixture
def proxy_data(rng):
    """
    z is a noisy proxy for x1 + x2 and enters first. Once x1 and x2 are
    both in, z's coefficient is exactly zero: the error is orthogonal to
    every column.
    """
    n = 200
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    z = x1 + x2 + 0.5 * rng.standard_normal(n)
    e = _orthogonalize(rng.standard_normal(n), x1, x2, z)
    e *= 0.2 / e.std()
    y = 1.0 + x1 + x2 + e
    return fit(np.column_stack([z, x1, x2]), y, names=['z', 'x1', 'x2'])


@pytest.fixture
def weak_term_data(rng):
    """
    y = 2 + 3 x1 + w / sqrt(n) + e, with w orthogonal to x1 and e
    orthogonal to both, scaled so that w's t statistic in y ~ x1 + w is
    exactly 1 (p ~ 0.32).
    """
    n = 100
    x1 = rng.standard_normal(n)
    w = _orthogonalize(rng.standard_normal(n), x1)
    w *= np.sqrt(n) / np.linalg.norm(w)
    e = _orthogonalize(rng.standard_normal(n), x1, w)
    e *= np.sqrt((n - 3) / np.sum(e ** 2))
    y = 2.0 + 3.0 * x1 + w / np.sqrt(n) + e
    return fit(np.column_stack([x1, w]), y, names=['x1', 'w'])


class _ConstantCriterion(CriterionStrategy):
    """Every candidate scores the same and every entry is accepted."""

    name = 'constant'

    def model_value(self, candidate):
        return None

    def entry_statistic(self, current, enlarged, term):
        return 0.5

    def accepts_entry(self, statistic, current):
        return True


class _SkipTerm(PValueCriterion):
    """p-value criterion whose entry statistic is undefined for one term."""

    def __init__(self, term):
        super().__init__(entry_alpha=0.1, removal_alpha=0.3)
        self.term = term

    def entry_statistic(self, current, enlarged, term):
        if term == self.term:
            raise NotComputableError(f"{term}: undefined", criterion='p')
        return super().entry_statistic(current, enlarged, term)


def _engine(model, strategy, order=None, **kwargs):
    constraints = ConstraintSet.build(order if order is not None else model.predictors)
    return StepwiseEngine(model.design, model, strategy, constraints,
                          direction=kwargs.pop('direction', 'forward'), **kwargs)


class TestForwardMtcars:

    def test_enters_wt_then_hp(self, mtcars_full):
        result = step_forward(mtcars_full)
        assert result.entered == ('wt', 'hp')
        assert result.predictors == ('wt', 'hp')
        assert result.r_squared == pytest.approx(0.8267855, rel=1e-6)
        assert result.state is SearchState.CONVERGED

    def test_step_records(self, mtcars_full):
        result = step_forward(mtcars_full)
        first, second = result.steps
        assert first.step == 1 and first.action == 'enter'
        assert first.predictors == ('wt',)
        assert first.r2 == pytest.approx(0.7528328, rel=1e-6)
        assert second.predictors == ('wt', 'hp')
        wt_hp = fit(mtcars_full.design.subset(['wt', 'hp']))
        assert second.aic == pytest.approx(aic(wt_hp))
        assert second.p_value == pytest.approx(wt_hp.p_value('hp'))

    def test_remaining_candidates_fail_entry(self, mtcars_full):
        result = step_forward(mtcars_full)
        for term in ('disp', 'qsec'):
            assert _p_when_added(mtcars_full, result.predictors, term) > 0.1

    def test_entered_terms_pass_entry(self, mtcars_full):
        result = step_forward(mtcars_full)
        assert all(s.criterion_value <= 0.1 for s in result.steps)
        np.testing.assert_allclose(result.criterion_trajectory,
                                   [s.p_value for s in result.steps])

    def test_idempotent_on_final_set(self, mtcars_full):
        first = step_forward(mtcars_full)
        again = step_forward(mtcars_full, include=list(first.predictors))
        assert again.no_change
        assert again.n_steps == 0
        assert set(again.predictors) == set(first.predictors)

    def test_no_change_when_nothing_enters(self, mtcars_full):
        result = step_forward(mtcars_full, entry_alpha=1e-12)
        assert result.no_change
        assert result.predictors == ()
        assert result.model.n_coefficients == 1
        assert "No variables entered or removed" in result.summary()

    def test_include_and_exclude(self, mtcars_full):
        result = step_forward(mtcars_full, include=['qsec'], exclude=[2])
        assert result.initial_predictors == ('qsec',)
        assert 'qsec' in result.predictors
        assert 'wt' not in result.predictors
        assert all(s.variable != 'wt' for s in result.steps)

    def test_hierarchical_follows_declared_order(self, mtcars_full):
        result = step_forward(mtcars_full, hierarchical=True)
        order = ('disp', 'hp', 'wt', 'qsec')
        assert len(result.predictors) >= 1
        assert result.predictors == order[:len(result.predictors)]

    def test_progress_output(self, mtcars_full, capsys):
        step_forward(mtcars_full, progress=True)
        out = capsys.readouterr().out
        assert "Step 1: enter wt" in out
        assert "Step 2: enter hp" in out

    def test_details_output(self, mtcars_full, capsys):
        step_forward(mtcars_full, details=True)
        out = capsys.readouterr().out
        assert "enter qsec" in out
        assert "state: converged" in out

    def test_silent_by_default(self, mtcars_full, capsys):
        step_forward(mtcars_full)
        assert capsys.readouterr().out == ""


class TestMetricCriteria:

    def test_aic_trajectory_decreases(self, mtcars_full):
        result = step_forward(mtcars_full, criterion='aic')
        values = result.criterion_trajectory
        assert len(values) >= 1
        assert all(b < a for a, b in zip(values, values[1:]))
        assert result.final.criterion_value == pytest.approx(aic(result.model))

    def test_rsq_enters_everything(self, mtcars_full):
        result = step_forward(mtcars_full, criterion='rsq')
        assert set(result.predictors) == {'disp', 'hp', 'wt', 'qsec'}
        values = result.criterion_trajectory
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_backward_sbc_improves(self, mtcars_full):
        result = step_backward(mtcars_full, criterion='sbc')
        values = result.criterion_trajectory
        assert all(b < a for a, b in zip(values, values[1:]))
        assert all(s.action == 'remove' for s in result.steps)

    def test_stata_method_shifts_aic(self, mtcars_full):
        r_run = step_forward(mtcars_full, criterion='aic')
        stata_run = step_forward(mtcars_full, criterion='aic', method='STATA')
        assert stata_run.predictors == r_run.predictors
        assert stata_run.final.criterion_value == pytest.approx(
            r_run.final.criterion_value - 2.0
        )


class TestBackward:

    def test_starts_from_all_allowed(self, mtcars_full):
        result = step_backward(mtcars_full, exclude=['disp'])
        assert result.initial_predictors == ('hp', 'wt', 'qsec')

    def test_survivors_pass_removal_test(self, mtcars_full):
        result = step_backward(mtcars_full)
        for term in result.predictors:
            assert result.model.p_value(term) <= 0.3

    def test_removed_terms_failed(self, mtcars_full):
        result = step_backward(mtcars_full)
        assert all(s.criterion_value > 0.3 for s in result.steps)

    def test_included_never_removed(self, mtcars_full):
        result = step_backward(mtcars_full, include=['disp'], removal_alpha=0.01)
        assert 'disp' in result.predictors
        assert 'disp' not in result.removed


class TestNoisyData:

    def test_forward_finds_signal(self, noisy_selection_data):
        result = step_forward(noisy_selection_data)
        assert result.predictors[:2] == ('a', 'c')

    def test_backward_keeps_signal(self, noisy_selection_data):
        result = step_backward(noisy_selection_data)
        assert {'a', 'c'} <= set(result.predictors)

    def test_both_finds_signal(self, noisy_selection_data):
        result = step_both(noisy_selection_data)
        assert {'a', 'c'} <= set(result.predictors)

    def test_both_with_aic(self, noisy_selection_data):
        result = step_both(noisy_selection_data, criterion='aic')
        assert {'a', 'c'} <= set(result.predictors)
        assert result.direction == 'both'


class TestBothRemoval:

    def test_proxy_removed_after_components_enter(self, proxy_data):
        result = step_both(proxy_data)
        assert result.entered[0] == 'z'
        assert result.removed == ('z',)
        assert set(result.predictors) == {'x1', 'x2'}
        assert result.state is SearchState.CONVERGED

    def test_remove_step_fails_removal_test(self, proxy_data):
        result = step_both(proxy_data)
        last = result.steps[-1]
        assert last.action == 'remove' and last.variable == 'z'
        assert last.p_value > 0.3
        assert last.criterion_value == pytest.approx(last.p_value)
        assert not any('revisited' in w for w in result.warnings)

    def test_removed_term_does_not_re_enter(self, proxy_data):
        result = step_both(proxy_data)
        assert _p_when_added(proxy_data, result.predictors, 'z') > 0.1
        assert [s.variable for s in result.steps].count('z') == 2

    def test_revisited_set_stops_search(self, weak_term_data):
        with pytest.warns(RuntimeWarning, match="revisited"):
            result = step_both(weak_term_data, entry_alpha=0.9, removal_alpha=0.05)

        assert [(s.action, s.variable) for s in result.steps] == [
            ('enter', 'x1'), ('enter', 'w'), ('remove', 'w'),
        ]
        assert result.predictors == ('x1',)
        assert result.info['cycled']
        assert any('revisited' in w for w in result.warnings)

        p_w = 2.0 * stats.t.sf(1.0, 97)
        assert result.steps[1].criterion_value == pytest.approx(p_w, rel=1e-6)
        assert result.steps[2].criterion_value == pytest.approx(p_w, rel=1e-6)

    def test_no_cycle_when_removal_is_looser(self, weak_term_data):
        result = step_both(weak_term_data, entry_alpha=0.1, removal_alpha=0.3)
        assert result.predictors == ('x1',)
        assert result.removed == ()
        assert not result.info['cycled']


class TestValidation:

    def test_bad_criterion(self, mtcars_full):
        with pytest.raises(ConfigurationError, match="criterion"):
            step_forward(mtcars_full, criterion='bic')

    def test_bad_alpha(self, mtcars_full):
        with pytest.raises(ConfigurationError):
            step_forward(mtcars_full, entry_alpha=0.0)
        with pytest.raises(ConfigurationError):
            step_backward(mtcars_full, removal_alpha=1.5)

    def test_bad_method(self, mtcars_full):
        with pytest.raises(ConfigurationError):
            step_forward(mtcars_full, method='SPSS')

    def test_overlapping_constraints(self, mtcars_full):
        with pytest.raises(ConfigurationError):
            step_both(mtcars_full, include=['wt'], exclude=['wt'])

    def test_sbic_needs_residual_df(self, rng):
        saturated = fit(rng.standard_normal((4, 3)), rng.standard_normal(4))
        assert saturated.df_residual == 0
        with pytest.raises(ConfigurationError, match="sbic"):
            step_forward(saturated, criterion='sbic')
        with pytest.raises(ConfigurationError, match="sbic"):
            step_both(saturated, criterion='sbic')

    def test_reference_model_without_predictors(self, mtcars_full):
        null = fit(mtcars_full.design.subset([]))
        with pytest.raises(ConfigurationError):
            step_forward(null)


class TestEngine:

    def test_degenerate_candidate_fails_search(self, collinear_data):
        X, y = collinear_data
        design = RegressionDesign.from_arrays(X, y)
        reference = fit(X[:, :2], y)
        strategy = make_criterion('rsq', full_model=reference)
        engine = StepwiseEngine(
            design, reference, strategy, ConstraintSet.build(design.predictors),
            direction='forward',
        )
        with pytest.raises(DegenerateModelError):
            engine.run()
        assert engine.state is SearchState.FAILED

    def test_uncomputable_start_fails_search(self, rng):
        saturated = fit(rng.standard_normal((4, 3)), rng.standard_normal(4))
        engine = _engine(saturated, make_criterion('sbic', full_model=saturated))
        with pytest.raises(NotComputableError):
            engine.run()
        assert engine.state is SearchState.FAILED

    def test_ties_go_to_earliest_declared(self, mtcars_full):
        order = ('disp', 'hp', 'wt', 'qsec')
        outcome = _engine(mtcars_full, _ConstantCriterion(), order=order).run()
        assert outcome.steps[0].variable == 'disp'
        assert tuple(s.variable for s in outcome.steps) == order

    def test_reversed_order_reverses_winner(self, mtcars_full):
        order = ('qsec', 'wt', 'hp', 'disp')
        outcome = _engine(mtcars_full, _ConstantCriterion(), order=order).run()
        assert outcome.steps[0].variable == 'qsec'
        assert tuple(s.variable for s in outcome.steps) == order

    def test_uncomputable_candidate_dropped(self, mtcars_full):
        outcome = _engine(mtcars_full, _SkipTerm('hp')).run()
        assert outcome.state is SearchState.CONVERGED
        assert outcome.steps[0].variable == 'wt'
        assert 'hp' not in outcome.final.predictors
        assert all(s.variable != 'hp' for s in outcome.steps)
        dropped = [w for w in outcome.warnings if 'dropped' in w]
        assert dropped
        assert all(w.startswith("enter hp: dropped") for w in dropped)

    def test_sinks_receive_lines(self, mtcars_full):
        lines = []
        strategy = make_criterion('p', full_model=mtcars_full)
        engine = StepwiseEngine(
            mtcars_full.design, mtcars_full, strategy,
            ConstraintSet.build(mtcars_full.predictors),
            direction='forward', progress=lines.append,
        )
        outcome = engine.run()
        assert outcome.state is SearchState.CONVERGED
        assert lines[0].startswith("Step 1: enter wt")
        assert outcome.n_fits > len(outcome.steps)


class TestReporting:

    def test_reportable(self, mtcars_full):
        assert isinstance(step_forward(mtcars_full), Reportable)

    def test_plot_data(self, mtcars_full):
        data = step_forward(mtcars_full).plot_data()
        assert list(data['step']) == [1, 2]
        assert data['variable'] == ['wt', 'hp']
        assert len(data['r2']) == 2

    def test_summary(self, mtcars_full):
        text = step_forward(mtcars_full).summary()
        assert "Stepwise Selection Summary" in text
        assert "entry alpha: 0.1" in text
        assert "Final model: ['wt', 'hp']" in text

    def test_info_and_timing(self, mtcars_full):
        result = step_forward(mtcars_full)
        assert result.info['n_steps'] == 2
        assert result.info['state'] == 'converged'
        assert 'search' in result.timing
