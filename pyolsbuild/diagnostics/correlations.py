"""
Correlations between the response and each predictor.

    zero-order  Pearson correlation of y and x_j
    partial     t_j / sqrt(t_j² + df),          df = n - p
    part        t_j sqrt((1 - R²) / df)         (semi-partial)

where t_j is x_j's t statistic in the full model.
"""

from __future__ import annotations

import numpy as np

from pyolsbuild.core.compute.timing import Timer
from pyolsbuild.core.exceptions import NotComputableError
from pyolsbuild.core.result import Result
from pyolsbuild.diagnostics._common import CorrelationParams
from pyolsbuild.diagnostics.solution import CorrelationSolution
from pyolsbuild.regression.solution import LinearSolution


def correlations(model: LinearSolution) -> CorrelationSolution:
    """
    Zero-order, partial and part correlations of every predictor.

    Raises:
        NotComputableError: If the model has no predictors or no residual
            degrees of freedom
    """
    df = model.df_residual
    if not model.predictors:
        raise NotComputableError("correlations: model has no predictors", criterion='correlations')
    if df <= 0:
        raise NotComputableError(
            f"correlations: requires positive degrees of freedom, got {df}",
            criterion='correlations',
            df=df,
        )

    timer = Timer()
    timer.start()

    with timer.section('correlations'):
        y = model.design.y
        zero_order = np.array([
            np.corrcoef(y, model.design.column(name))[0, 1]
            for name in model.predictors
        ])
        t = model.t_statistics[1:]
        partial = t / np.sqrt(t ** 2 + df)
        part = t * np.sqrt((1.0 - model.r_squared) / df)

    timer.stop()

    params = CorrelationParams(
        predictors=model.predictors,
        zero_order=zero_order,
        partial=partial,
        part=part,
    )
    return CorrelationSolution(_result=Result(
        params=params,
        info={'response': model.response, 'df_residual': df},
        timing=timer.result(),
        backend_name='cpu',
    ))
