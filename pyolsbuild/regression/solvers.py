"""
Solver dispatch for regression.

This module provides the fit() function (public API) and backend selection.
"""

from collections.abc import Sequence
from typing import Literal

from numpy.typing import ArrayLike

from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearSolution
from pyolsbuild.regression.backends.cpu import CPUQRBackend


BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    X_or_design: ArrayLike | RegressionDesign,
    y: ArrayLike | None = None,
    *,
    names: Sequence[str] | None = None,
    response: str = 'y',
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression model with intercept.

    Solves the ordinary least squares problem:
        min_β ||y - [1 X]β||²

    Accepts EITHER:
        1. A RegressionDesign object (y must be omitted)
        2. Predictor matrix X and response y (intercept is added)

    Args:
        X_or_design: RegressionDesign, or predictor matrix (n x k).
        y: Response vector (n,). Required when passing arrays.
        names: Predictor names for array input. Default x1, x2, ...
        response: Response name for array input.
        backend: Computational backend to use:
            - 'auto': Select best available (currently the CPU QR backend)
            - 'cpu', 'cpu_qr': CPU QR decomposition

    Returns:
        LinearSolution with coefficients, diagnostics, and summary methods

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If the model matrix is rank-deficient

    Example:
        >>> from pyolsbuild import DataSource
        >>> from pyolsbuild.regression import RegressionDesign, fit
        >>> ds = DataSource.from_dataframe(df)
        >>> model = fit(RegressionDesign.from_datasource(ds, x=['wt', 'hp'], y='mpg'))
        >>> print(model.summary())
    """
    # This is the boundary - validate here, trust everywhere else
    if isinstance(X_or_design, RegressionDesign):
        if y is not None:
            raise ValueError("y must not be given together with a RegressionDesign")
        design = X_or_design
    else:
        if y is None:
            raise ValueError("y required when passing arrays")
        design = RegressionDesign.from_arrays(X_or_design, y, names=names, response=response)

    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)
    return LinearSolution(_result=result, _design=design)


def _get_backend(choice: BackendChoice) -> CPUQRBackend:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
