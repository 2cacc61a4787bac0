"""
Linear algebra kernels for PyOLSBuild.

All functions use NumPy/SciPy (LAPACK under the hood), return structured
result dataclasses, and raise immediately with clear messages.
"""

from pyolsbuild.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
)

__all__ = [
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
]
