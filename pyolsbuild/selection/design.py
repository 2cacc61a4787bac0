"""
Selection Design.

Pairs the reference full model with the constraints of a selection
run. The regression design is taken from the model and shared, frozen,
by every candidate fit.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pyolsbuild.core.exceptions import ConfigurationError, ValidationError
from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.selection._constraints import ConstraintSet


@dataclass(frozen=True)
class SelectionDesign:
    """
    Validated input of a selection run.

    Construction:
        SelectionDesign.from_model(model, include=['wt'], exclude=[3])
    """
    _model: LinearSolution
    _constraints: ConstraintSet

    @classmethod
    def from_model(
        cls,
        model: LinearSolution,
        *,
        include: str | int | Iterable[str | int] | None = None,
        exclude: str | int | Iterable[str | int] | None = None,
    ) -> SelectionDesign:
        """
        Build from a fitted reference model.

        Raises:
            ValidationError: ``model`` is not a LinearSolution
            ConfigurationError: The model has no predictors, or include/
                exclude are unknown or overlap
        """
        if not isinstance(model, LinearSolution):
            raise ValidationError(
                f"model: expected a fitted LinearSolution, got {type(model).__name__}"
            )
        if not model.predictors:
            raise ConfigurationError("model: reference model has no predictors")

        constraints = ConstraintSet.build(model.predictors, include=include, exclude=exclude)
        return cls(_model=model, _constraints=constraints)

    @property
    def model(self) -> LinearSolution:
        """Reference full model."""
        return self._model

    @property
    def regression_design(self) -> RegressionDesign:
        return self._model.design

    @property
    def constraints(self) -> ConstraintSet:
        return self._constraints

    @property
    def predictors(self) -> tuple[str, ...]:
        """Declared predictor order."""
        return self._constraints.order

    @property
    def response(self) -> str:
        return self._model.response

    @property
    def n(self) -> int:
        return self._model.n
