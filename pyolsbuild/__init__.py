"""
PyOLSBuild: model building tools for ordinary least squares regression.

Variable selection (stepwise and exhaustive) and regression diagnostics
that reproduce the reference values of R's olsrr package.

Submodules:
    regression: OLS fitting (RegressionDesign, fit, LinearSolution)
    diagnostics: Information criteria, influence, heteroskedasticity,
        normality, correlations and plot data
    selection: Stepwise and all-possible/best-subset selection
    datasets: Reference datasets (mtcars)
"""

__version__ = "0.1.0"

from pyolsbuild.core import DataSource
from pyolsbuild import regression
from pyolsbuild import diagnostics
from pyolsbuild import selection
from pyolsbuild import datasets

__all__ = [
    "__version__",
    "DataSource",
    "regression",
    "diagnostics",
    "selection",
    "datasets",
]
