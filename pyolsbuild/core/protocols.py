"""
Core protocols for PyOLSBuild.

Structural interfaces shared across domains. We use Protocol (structural
typing) rather than ABC (nominal typing) so results from different
subpackages can satisfy the same contract without a common base class.
"""

from typing import Protocol, Any, runtime_checkable


@runtime_checkable
class Reportable(Protocol):
    """
    A result that can present itself.

    Selection results are assembled once and then only rendered: as
    plain text for the console, or as plain data for a plotting
    collaborator. Neither method computes anything new.
    """

    def summary(self) -> str:
        """Plain-text report."""
        ...

    def plot_data(self) -> dict[str, Any]:
        """
        Data for plotting, keyed by series name.

        Examples:
            Stepwise: {'step': [...], 'r2': [...], 'aic': [...], ...}
            Subsets:  {'mindex': [...], 'n': [...], 'cp': [...], ...}
        """
        ...
