"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyolsbuild import __version__
from pyolsbuild.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


class TestResultConstruction:

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={"state": "converged"},
            timing={"total_seconds": 0.01, "search": 0.008},
            backend_name="cpu_qr",
        )
        assert result.params.value == 42.0
        assert result.info["state"] == "converged"
        assert result.timing["search"] == 0.008
        assert result.backend_name == "cpu_qr"

    def test_default_warnings_empty(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu")
        assert result.warnings == ()

    def test_frozen(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu")
        with pytest.raises(FrozenInstanceError):
            result.backend_name = "other"


class TestWarnings:

    def test_has_warning_substring(self):
        result = Result(
            params=FakeParams(1.0), info={}, timing=None, backend_name="cpu",
            warnings=("enter qsec: dropped, aic undefined",),
        )
        assert result.has_warning("dropped")
        assert not result.has_warning("revisited")


class TestProvenance:

    def test_default_provenance_keys(self):
        prov = _default_provenance()
        assert set(prov) == {'pyolsbuild', 'numpy', 'scipy', 'python'}
        assert prov['pyolsbuild'] == __version__

    def test_result_carries_provenance(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu")
        assert result.provenance['pyolsbuild'] == __version__
