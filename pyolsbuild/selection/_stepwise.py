"""
Stepwise search state machine.

    READY -> EVALUATING -> ADVANCED -> EVALUATING -> ... -> CONVERGED
                                                        +-> FAILED

Forward search starts from the included predictors (the intercept-only
model when there are none) and enters one free predictor per step.
Backward search starts from every allowed predictor and removes one
non-included predictor per step. Bidirectional search alternates one
forward entry with a full backward pass; because the backward pass
follows the entry, a predictor removed in an iteration cannot re-enter
before the next one.

Candidates of one iteration are compared in declared predictor order,
so exact ties go to the earliest declared predictor.

The engine never prints. Progress and detail lines are handed to the
optional ``progress``/``details`` callables supplied by the caller.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from pyolsbuild.core.exceptions import DegenerateModelError, NotComputableError
from pyolsbuild.diagnostics.criteria import AICMethod, aic, sbc, sbic
from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._candidate import CandidateResult, fit_candidate, fit_null
from pyolsbuild.selection._common import SearchOutcome, SearchState, StepRecord
from pyolsbuild.selection._constraints import ConstraintSet
from pyolsbuild.selection._criteria import CriterionStrategy, term_p_value

Sink = Callable[[str], None]


def _or_nan(compute: Callable[[], float]) -> float:
    try:
        return compute()
    except NotComputableError:
        return math.nan


class StepwiseEngine:
    """
    One stepwise search over a frozen design.

    Args:
        design: Design holding every predictor of the reference model
        full_model: Reference model (for SBIC)
        strategy: Criterion strategy driving the search
        constraints: Included/excluded predictors and declared order
        direction: 'forward', 'backward' or 'both'
        hierarchical: Forward only; test just the next predictor in
            declared order and stop at the first one that fails
        method: Information-criterion family for the AIC/SBC columns
        progress: Receives one line per accepted step and the final state
        details: Receives one line per evaluated or dropped candidate
    """

    def __init__(
        self,
        design: RegressionDesign,
        full_model: LinearSolution,
        strategy: CriterionStrategy,
        constraints: ConstraintSet,
        *,
        direction: str,
        hierarchical: bool = False,
        method: AICMethod = 'R',
        progress: Sink | None = None,
        details: Sink | None = None,
    ):
        self._design = design
        self._full_model = full_model
        self._strategy = strategy
        self._constraints = constraints
        self._direction = direction
        self._hierarchical = hierarchical
        self._method = method
        self._progress = progress
        self._details = details

        self._state = SearchState.READY
        self._steps: list[StepRecord] = []
        self._warnings: list[str] = []
        self._n_fits = 0

    @property
    def state(self) -> SearchState:
        return self._state

    # === Reporting ===

    def _say(self, line: str) -> None:
        if self._progress is not None:
            self._progress(line)

    def _detail(self, line: str) -> None:
        if self._details is not None:
            self._details(line)

    def _enter_state(self, state: SearchState) -> None:
        self._state = state
        self._detail(f"  state: {state.value}")

    # === Fitting ===

    def _fit(self, predictors: Sequence[str]) -> CandidateResult:
        self._n_fits += 1
        if not predictors:
            return fit_null(self._design)
        return fit_candidate(self._design, predictors)

    def _tracked(self, candidate: CandidateResult) -> CandidateResult:
        """Attach the model-level criterion value, for metric strategies."""
        return candidate.with_criterion(self._strategy.model_value(candidate))

    def _initial(self) -> CandidateResult:
        if self._direction == 'backward':
            start = self._constraints.allowed
        else:
            start = self._constraints.included_ordered
        return self._tracked(self._fit(start))

    # === Evaluation ===

    def _best(
        self,
        current: CandidateResult,
        neighbours: list[tuple[str, tuple[str, ...]]],
        action: str,
    ) -> tuple[str, float, CandidateResult] | None:
        """
        Fit every neighbour and return the best (term, statistic, model).

        Neighbours whose statistic is not computable are dropped and
        reported. DegenerateModelError propagates.
        """
        if action == 'enter':
            statistic = self._strategy.entry_statistic
            prefers = self._strategy.prefers_entry
        else:
            statistic = self._strategy.removal_statistic
            prefers = self._strategy.prefers_removal

        best = None
        for term, predictors in sorted(neighbours, key=lambda nb: self._constraints.rank(nb[0])):
            neighbour = self._fit(predictors)
            try:
                stat = statistic(current, neighbour, term)
            except NotComputableError as e:
                message = f"{action} {term}: dropped, {e}"
                self._warnings.append(message)
                self._detail(f"    {message}")
                continue

            self._detail(f"    {action} {term:<12} {self._strategy.name} = {stat:.6g}")
            if best is None or prefers(stat, best[1]):
                best = (term, stat, neighbour)
        return best

    def _record(
        self,
        action: str,
        term: str,
        stat: float,
        before: CandidateResult,
        after: CandidateResult,
    ) -> None:
        model = after.model
        p_source = after.model if action == 'enter' else before.model
        record = StepRecord(
            step=len(self._steps) + 1,
            action=action,
            variable=term,
            predictors=after.predictors,
            criterion_value=stat,
            p_value=_or_nan(lambda: term_p_value(p_source, term)),
            r2=model.r_squared,
            adj_r2=model.adjusted_r_squared,
            aic=_or_nan(lambda: aic(model, method=self._method)),
            sbc=_or_nan(lambda: sbc(model, method=self._method)),
            sbic=_or_nan(lambda: sbic(model, self._full_model)),
            rmse=model.rmse,
        )
        self._steps.append(record)
        self._say(
            f"Step {record.step}: {action} {term} "
            f"({self._strategy.name} = {stat:.6g}, R2 = {record.r2:.4f})"
        )

    def _forward_step(self, current: CandidateResult) -> CandidateResult | None:
        self._enter_state(SearchState.EVALUATING)
        pool = [v for v in self._constraints.free if v not in current.predictors]
        if self._hierarchical:
            pool = pool[:1]
        if not pool:
            return None

        best = self._best(current, [(v, current.predictors + (v,)) for v in pool], 'enter')
        if best is None:
            return None
        term, stat, neighbour = best
        if not self._strategy.accepts_entry(stat, current):
            return None

        accepted = self._tracked(neighbour).with_term(
            term, _or_nan(lambda: term_p_value(neighbour.model, term)),
        )
        self._record('enter', term, stat, current, accepted)
        self._enter_state(SearchState.ADVANCED)
        return accepted

    def _backward_step(self, current: CandidateResult) -> CandidateResult | None:
        self._enter_state(SearchState.EVALUATING)
        pool = [v for v in current.predictors if v not in self._constraints.included]
        if not pool:
            return None

        neighbours = [
            (v, tuple(x for x in current.predictors if x != v))
            for v in pool
        ]
        best = self._best(current, neighbours, 'remove')
        if best is None:
            return None
        term, stat, neighbour = best
        if not self._strategy.accepts_removal(stat, current):
            return None

        accepted = self._tracked(neighbour).with_term(
            term, _or_nan(lambda: term_p_value(current.model, term)),
        )
        self._record('remove', term, stat, current, accepted)
        self._enter_state(SearchState.ADVANCED)
        return accepted

    # === Driver ===

    def run(self) -> SearchOutcome:
        """
        Run the search to convergence.

        Raises:
            DegenerateModelError: A visited model could not be fitted
            NotComputableError: The criterion is undefined for the
                starting model

        The engine is left in the FAILED state on either error.
        """
        iterations = 0
        cycled = False
        try:
            initial = current = self._initial()

            if self._direction == 'forward':
                while True:
                    iterations += 1
                    nxt = self._forward_step(current)
                    if nxt is None:
                        break
                    current = nxt

            elif self._direction == 'backward':
                while True:
                    iterations += 1
                    nxt = self._backward_step(current)
                    if nxt is None:
                        break
                    current = nxt

            else:
                visited = {frozenset(current.predictors)}
                while True:
                    iterations += 1
                    nxt = self._forward_step(current)
                    if nxt is None:
                        break
                    current = nxt
                    while True:
                        reduced = self._backward_step(current)
                        if reduced is None:
                            break
                        current = reduced

                    key = frozenset(current.predictors)
                    if key in visited:
                        message = (
                            f"search revisited predictor set {list(current.predictors)} "
                            f"at iteration {iterations}; stopping"
                        )
                        self._warnings.append(message)
                        self._say(message)
                        cycled = True
                        break
                    visited.add(key)

        except (DegenerateModelError, NotComputableError):
            self._enter_state(SearchState.FAILED)
            self._say(f"Search failed after {len(self._steps)} step(s)")
            raise

        self._enter_state(SearchState.CONVERGED)
        if not self._steps:
            self._say("No variables entered or removed")
        self._say(f"Converged: {len(self._steps)} step(s), final model {list(current.predictors)}")

        return SearchOutcome(
            initial=initial,
            final=current,
            steps=tuple(self._steps),
            state=self._state,
            iterations=iterations,
            n_fits=self._n_fits,
            warnings=tuple(self._warnings),
            cycled=cycled,
        )
