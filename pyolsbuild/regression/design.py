"""
Regression Design.

Design wraps a DataSource and extracts the response and a named set of
predictor columns. It knows it's building an intercept-bearing linear
model; DataSource doesn't.

Like a furniture maker visiting the lumber yard: "I need these logs
for making chairs." The lumber yard just provides logs.

Subsets of the same design (the candidate models of a selection run)
share the underlying column arrays; nothing is copied or mutated.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyolsbuild.core.datasource import DataSource
from pyolsbuild.core.exceptions import ValidationError
from pyolsbuild.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_unique_names,
)

INTERCEPT = '(Intercept)'


@dataclass(frozen=True)
class RegressionDesign:
    """
    Regression design specification.

    Holds the response, the ordered predictor columns, and the model
    matrix [1 | x_1 ... x_k]. Immutable after construction.

    Construction:
        RegressionDesign.from_datasource(ds, y='mpg')                # X = all other columns
        RegressionDesign.from_datasource(ds, x=['wt', 'hp'], y='mpg')
        RegressionDesign.from_arrays(X, y, names=['wt', 'hp'])
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _columns: dict[str, NDArray[np.floating[Any]]]
    _predictors: tuple[str, ...]
    _response: str
    _n: int
    _source: DataSource | None = None

    @classmethod
    def from_datasource(
        cls,
        source: DataSource,
        *,
        y: str,
        x: str | Sequence[str] | None = None,
    ) -> RegressionDesign:
        """
        Build Design from DataSource.

        Args:
            source: The DataSource
            y: Response column.
            x: Predictor column(s). If None, uses every column except y,
               in the source's column order.

        Returns:
            Design ready for regression
        """
        if x is None:
            names = [c for c in source.columns if c != y]
            if not names:
                raise ValidationError("No predictor columns available")
        elif isinstance(x, str):
            names = [x]
        else:
            names = list(x)

        if y in names:
            raise ValidationError(f"y: response {y!r} also listed as a predictor")

        columns = {name: np.asarray(source[name], dtype=np.float64) for name in names}
        y_arr = np.asarray(source[y], dtype=np.float64)
        return cls._build(columns, y_arr, response=y, source=source)

    @classmethod
    def from_arrays(
        cls,
        X: NDArray,
        y: NDArray,
        *,
        names: Sequence[str] | None = None,
        response: str = 'y',
    ) -> RegressionDesign:
        """
        Build Design directly from arrays.

        X holds predictor columns only; the intercept is added here.
        Default names are x1, x2, ...
        """
        X = check_array(X, 'X')
        y = check_array(y, 'y')
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()
        check_2d(X, 'X')

        if names is None:
            names = [f"x{i + 1}" for i in range(X.shape[1])]
        if len(names) != X.shape[1]:
            raise ValidationError(
                f"names: expected {X.shape[1]} names, got {len(names)}"
            )

        columns = {name: X[:, i] for i, name in enumerate(names)}
        return cls._build(columns, y, response=response, source=None)

    @classmethod
    def _build(
        cls,
        columns: dict[str, NDArray],
        y: NDArray,
        *,
        response: str,
        source: DataSource | None,
    ) -> RegressionDesign:
        """Internal builder with validation."""
        names = tuple(columns.keys())
        check_unique_names(names, 'x')
        check_1d(y, 'y')
        check_finite(y, 'y')
        for name, col in columns.items():
            check_1d(col, name)
            check_finite(col, name)
            check_consistent_length(col, y, names=(name, response))

        n = y.shape[0]
        X = np.column_stack([np.ones(n)] + [columns[name] for name in names])
        check_min_samples(X, X.shape[1], 'X')

        return cls(
            _X=X,
            _y=y,
            _columns=dict(columns),
            _predictors=names,
            _response=response,
            _n=n,
            _source=source,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Model matrix (n x p), intercept column first."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of coefficients, intercept included."""
        return self._X.shape[1]

    @property
    def predictors(self) -> tuple[str, ...]:
        """Predictor names in declared order."""
        return self._predictors

    @property
    def coefficient_names(self) -> tuple[str, ...]:
        return (INTERCEPT,) + self._predictors

    @property
    def response(self) -> str:
        return self._response

    @property
    def source(self) -> DataSource | None:
        """Original DataSource, if available."""
        return self._source

    def column(self, name: str) -> NDArray[np.floating[Any]]:
        """Raw predictor column by name."""
        if name not in self._columns:
            raise KeyError(
                f"Design has no predictor '{name}'. Available: {self._predictors}"
            )
        return self._columns[name]

    def subset(self, predictors: Sequence[str]) -> RegressionDesign:
        """
        Design over a subset of this design's predictors.

        Order follows ``predictors``. An empty sequence gives the
        intercept-only design.
        """
        names = tuple(predictors)
        check_unique_names(names, 'predictors')
        missing = [name for name in names if name not in self._columns]
        if missing:
            raise KeyError(
                f"Design has no predictor(s) {missing}. Available: {self._predictors}"
            )
        X = np.column_stack([np.ones(self._n)] + [self._columns[name] for name in names])
        return RegressionDesign(
            _X=X,
            _y=self._y,
            _columns=self._columns,
            _predictors=names,
            _response=self._response,
            _n=self._n,
            _source=self._source,
        )

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X (for standard errors)."""
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self._X.T @ self._y
