"""
Regression diagnostics.

Model selection criteria, influence measures, heteroskedasticity and
normality tests, correlations, and data for diagnostic plots. Every
function takes a fitted LinearSolution.

Public API:
    model_metrics(model, full_model) -> (ModelMetrics, messages)
    aic, sbc, sbic, mallows_cp, msep, fpe, apc, hsp, press, pred_rsq
    leverage, hadi, rstandard, rstudent, cooks_distance, dffits, dfbetas
    breusch_pagan(model, ...) -> HeteroskedasticitySolution
    score_test(model, ...) -> HeteroskedasticitySolution
    test_normality(model) -> NormalitySolution
    test_correlation(model) -> float
    correlations(model) -> CorrelationSolution

Example:
    >>> from pyolsbuild.diagnostics import aic, breusch_pagan
    >>> aic(model)
    >>> print(breusch_pagan(model, rhs=True).summary())
"""

from pyolsbuild.diagnostics.criteria import (
    AICMethod,
    ModelMetrics,
    aic,
    apc,
    coefficient_p_value,
    fpe,
    hsp,
    log_likelihood,
    mallows_cp,
    model_metrics,
    msep,
    pred_rsq,
    press,
    sbc,
    sbic,
)
from pyolsbuild.diagnostics.influence import (
    HadiMeasure,
    cooks_distance,
    dfbetas,
    dffits,
    hadi,
    leverage,
    rstandard,
    rstudent,
)
from pyolsbuild.diagnostics.heteroskedasticity import breusch_pagan, score_test
from pyolsbuild.diagnostics.normality import test_normality, test_correlation
from pyolsbuild.diagnostics.correlations import correlations
from pyolsbuild.diagnostics.solution import (
    CorrelationSolution,
    HeteroskedasticitySolution,
    NormalitySolution,
)
from pyolsbuild.diagnostics import plot_data

__all__ = [
    # Criteria
    "AICMethod",
    "ModelMetrics",
    "model_metrics",
    "log_likelihood",
    "aic",
    "sbc",
    "sbic",
    "mallows_cp",
    "msep",
    "fpe",
    "apc",
    "hsp",
    "press",
    "pred_rsq",
    "coefficient_p_value",
    # Influence
    "HadiMeasure",
    "leverage",
    "hadi",
    "rstandard",
    "rstudent",
    "cooks_distance",
    "dffits",
    "dfbetas",
    # Tests
    "breusch_pagan",
    "score_test",
    "test_normality",
    "test_correlation",
    "correlations",
    "HeteroskedasticitySolution",
    "NormalitySolution",
    "CorrelationSolution",
    "plot_data",
]
