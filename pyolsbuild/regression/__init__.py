"""
Ordinary least squares regression.

This is the fitting collaborator of the model-building tools: every
reference model, stepwise candidate and enumerated subset is fitted here.

Public API:
    fit(X, y, ...) -> LinearSolution
    fit(design) -> LinearSolution

Example:
    >>> from pyolsbuild.regression import fit
    >>> result = fit(X, y, names=['wt', 'hp'], response='mpg')
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from pyolsbuild.regression.design import RegressionDesign, INTERCEPT
from pyolsbuild.regression.solution import LinearSolution, LinearParams, AnovaRow
from pyolsbuild.regression.solvers import fit

__all__ = [
    "fit",
    "RegressionDesign",
    "INTERCEPT",
    "LinearSolution",
    "LinearParams",
    "AnovaRow",
]
