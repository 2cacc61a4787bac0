"""
CPU reference backend for linear regression.

Uses QR decomposition via LAPACK (through NumPy/SciPy). This is the
reference implementation that replicates R's lm() for full-rank designs.
"""

from typing import Any

import numpy as np
from scipy.linalg import solve_triangular

from pyolsbuild.core.result import Result
from pyolsbuild.core.compute.timing import Timer
from pyolsbuild.core.compute.linalg.qr import qr_solve_cpu, qr_cpu
from pyolsbuild.regression.design import RegressionDesign
from pyolsbuild.regression.solution import LinearParams


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Solves RegressionDesign -> LinearParams. Rank-deficient designs are
    rejected with SingularMatrixError: every model a selection run fits
    must be identifiable.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: RegressionDesign) -> Result[LinearParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. Compute QR decomposition: X = QR
            2. Solve: β = R⁻¹ Q'y
            3. Leverage h_i = Σ_j Q_ij², effects Q'y, (X'X)⁻¹ = R⁻¹R⁻ᵀ

        Raises:
            SingularMatrixError: If X is rank-deficient
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n, p = X.shape

        with timer.section('qr_decomposition'):
            qr_result = qr_cpu(X, mode='reduced')

        with timer.section('solve'):
            coefficients = qr_solve_cpu(X, y, check_rank=True, qr_result=qr_result)

        with timer.section('residuals'):
            fitted_values = X @ coefficients
            residuals = y - fitted_values

        with timer.section('statistics'):
            Q = qr_result.Q
            R = qr_result.R[:p, :p]
            effects = Q.T @ y
            leverage = np.sum(Q ** 2, axis=1)
            R_inv = solve_triangular(R, np.eye(p), lower=False)
            xtx_inv = R_inv @ R_inv.T
            rss = float(residuals @ residuals)
            tss = float(np.sum((y - np.mean(y)) ** 2))

        timer.stop()

        params = LinearParams(
            coefficients=coefficients,
            residuals=residuals,
            fitted_values=fitted_values,
            effects=effects,
            leverage=leverage,
            xtx_inv=xtx_inv,
            rss=rss,
            tss=tss,
            rank=qr_result.rank,
            df_residual=n - qr_result.rank,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
