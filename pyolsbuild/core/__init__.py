"""
Core infrastructure for PyOLSBuild.

Shared abstractions and utilities used by the regression, diagnostics and
selection subpackages.

Key components:
    result: Generic Result[P] envelope
    protocols: Reportable presentation contract
    exceptions: Exception hierarchy
    validation: Input validators
    datasource: Named-column data container
    compute: Timing and linear algebra primitives
"""

from pyolsbuild.core.datasource import DataSource
from pyolsbuild.core.result import Result
from pyolsbuild.core.protocols import Reportable
from pyolsbuild.core.exceptions import (
    PyOLSBuildError,
    ValidationError,
    DimensionError,
    ConfigurationError,
    TooFewPredictorsError,
    NumericalError,
    SingularMatrixError,
    DegenerateModelError,
    NotComputableError,
)

__all__ = [
    "DataSource",
    "Result",
    "Reportable",
    # Exceptions
    "PyOLSBuildError",
    "ValidationError",
    "DimensionError",
    "ConfigurationError",
    "TooFewPredictorsError",
    "NumericalError",
    "SingularMatrixError",
    "DegenerateModelError",
    "NotComputableError",
]
