"""
Exception hierarchy for PyOLSBuild.

All exceptions inherit from PyOLSBuildError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyOLSBuildError(Exception):
    """Base exception for all PyOLSBuild errors."""
    pass


class ValidationError(PyOLSBuildError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class ConfigurationError(ValidationError):
    """
    A model-building run was configured inconsistently.

    Raised for overlapping include/exclude sets, unknown predictor names,
    unsupported criterion or direction choices, and thresholds outside
    their valid range. Always raised before any candidate model is fitted.
    """
    pass


class TooFewPredictorsError(ConfigurationError):
    """
    Not enough candidate predictors for the requested procedure.

    Attributes:
        n_predictors: Number of candidate predictors available
        required: Minimum number the procedure needs
    """

    def __init__(self, message: str, n_predictors: int, required: int):
        super().__init__(message)
        self.n_predictors = n_predictors
        self.required = required


class NumericalError(PyOLSBuildError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a matrix operation requires invertibility but the matrix
    is singular or numerically rank-deficient.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class DegenerateModelError(NumericalError):
    """
    A candidate model cannot be fitted meaningfully.

    Raised when the predictor subset is empty or has duplicates, when
    its model matrix is rank-deficient, or when it leaves fewer than one
    residual degree of freedom.

    Attributes:
        predictors: The offending predictor subset
        rank: Numerical rank of the model matrix, if computed
        df_residual: Residual degrees of freedom, if computed
    """

    def __init__(
        self,
        message: str,
        predictors: tuple[str, ...] = (),
        rank: int | None = None,
        df_residual: int | None = None,
    ):
        super().__init__(message)
        self.predictors = tuple(predictors)
        self.rank = rank
        self.df_residual = df_residual


class NotComputableError(NumericalError):
    """
    A criterion is undefined for a particular model.

    Raised when the degrees of freedom a criterion needs are non-positive,
    or when the residual sum of squares makes a logarithm undefined.

    Attributes:
        criterion: Name of the criterion that failed
        df: The offending degrees of freedom, if applicable
    """

    def __init__(
        self,
        message: str,
        criterion: str,
        df: int | None = None,
    ):
        super().__init__(message)
        self.criterion = criterion
        self.df = df
