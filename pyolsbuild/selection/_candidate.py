"""
Candidate model fitting.

Every model a search visits goes through fit_candidate(), which
turns fitting failures into DegenerateModelError so the engines have a
single failure to reason about.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyolsbuild.core.exceptions import (
    ConfigurationError,
    DegenerateModelError,
    SingularMatrixError,
)
from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.regression.solvers import fit


@dataclass(frozen=True)
class CandidateResult:
    """
    One fitted candidate model.

    ``term`` is the predictor whose entry or removal produced this model
    and ``term_p_value`` its p-value; ``criterion_value`` is the value
    of the driving criterion, when one has been computed.
    """
    predictors: tuple[str, ...]
    model: LinearSolution
    term: str | None = None
    term_p_value: float | None = None
    criterion_value: float | None = None

    @property
    def coefficients(self) -> dict[str, float]:
        return self.model.coefficient_dict

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self.model.residuals

    @property
    def r_squared(self) -> float:
        return self.model.r_squared

    @property
    def adj_r_squared(self) -> float:
        return self.model.adjusted_r_squared

    @property
    def rmse(self) -> float:
        return self.model.rmse

    def with_criterion(self, value: float | None) -> CandidateResult:
        return replace(self, criterion_value=value)

    def with_term(self, term: str | None, p_value: float | None) -> CandidateResult:
        return replace(self, term=term, term_p_value=p_value)


def fit_candidate(design: RegressionDesign, predictors: Sequence[str]) -> CandidateResult:
    """
    Fit y on an intercept plus ``predictors``.

    Raises:
        ConfigurationError: A name is not a predictor of the design
        DegenerateModelError: Empty or duplicated subset, a rank-deficient
            model matrix, or fewer than one residual degree of freedom
    """
    names = tuple(predictors)

    if not names:
        raise DegenerateModelError(
            "Candidate model has no predictors",
            predictors=names,
        )
    if len(set(names)) != len(names):
        dupes = sorted({v for v in names if names.count(v) > 1})
        raise DegenerateModelError(
            f"Candidate model repeats predictor(s) {dupes}",
            predictors=names,
        )
    unknown = [v for v in names if v not in design.predictors]
    if unknown:
        raise ConfigurationError(
            f"Unknown predictor(s) {unknown}. Available: {list(design.predictors)}"
        )

    df_residual = design.n - len(names) - 1
    if df_residual < 1:
        raise DegenerateModelError(
            f"Candidate model {list(names)} leaves {df_residual} residual degrees "
            f"of freedom (n={design.n}), need at least 1",
            predictors=names,
            df_residual=df_residual,
        )

    try:
        model = fit(design.subset(names))
    except SingularMatrixError as e:
        raise DegenerateModelError(
            f"Candidate model {list(names)} is rank-deficient: "
            f"rank={e.rank}, expected={e.expected_rank}",
            predictors=names,
            rank=e.rank,
            df_residual=df_residual,
        ) from e

    return CandidateResult(predictors=names, model=model)


def fit_null(design: RegressionDesign) -> CandidateResult:
    """Fit the intercept-only model, the baseline of forward search."""
    return CandidateResult(predictors=(), model=fit(design.subset(())))
