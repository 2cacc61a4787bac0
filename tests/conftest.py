"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyolsbuild.datasets import mtcars
from pyolsbuild.regression import RegressionDesign, fit


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Simple regression dataset for basic tests."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([1.0, -2.0, 0.5])
    y = 3.0 + X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def mtcars_source():
    return mtcars()


@pytest.fixture
def mtcars_full(mtcars_source):
    """mpg ~ disp + hp + wt + qsec, the reference model of the selection examples."""
    design = RegressionDesign.from_datasource(
        mtcars_source, x=['disp', 'hp', 'wt', 'qsec'], y='mpg',
    )
    return fit(design)


@pytest.fixture
def mtcars_five(mtcars_source):
    """mpg ~ disp + hp + wt + drat + qsec, the reference model of the diagnostics examples."""
    design = RegressionDesign.from_datasource(
        mtcars_source, x=['disp', 'hp', 'wt', 'drat', 'qsec'], y='mpg',
    )
    return fit(design)


@pytest.fixture
def noisy_selection_data(rng):
    """
    Six predictors, two of which (a, c) drive the response strongly.
    """
    n = 200
    X = rng.standard_normal((n, 6))
    y = 1.0 + 3.0 * X[:, 0] - 2.0 * X[:, 2] + rng.standard_normal(n)
    names = ['a', 'b', 'c', 'd', 'e', 'f']
    return fit(X, y, names=names, response='y')
