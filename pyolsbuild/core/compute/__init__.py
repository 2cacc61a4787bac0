"""
Shared compute infrastructure for PyOLSBuild.

Domain-agnostic numeric helpers used by the regression backend and the
selection engine.

Submodules:
    timing: Execution timing utilities
    linalg: Linear algebra kernels (QR)
"""

from pyolsbuild.core.compute.timing import Timer

__all__ = [
    "Timer",
]
