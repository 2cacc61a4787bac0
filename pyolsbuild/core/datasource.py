"""
Universal DataSource for PyOLSBuild.

DataSource is the "I have data" abstraction. It holds named numeric
columns and does not know which model will be built from them.

Usage:
    from pyolsbuild import DataSource

    ds = DataSource.from_arrays(mpg=mpg, wt=wt, hp=hp)
    ds = DataSource.from_file("cars.csv")
    ds = DataSource.from_dataframe(df)

    ds.columns      # ('mpg', 'wt', 'hp') in insertion order
    wt = ds['wt']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyolsbuild.core.exceptions import DimensionError, ValidationError

if TYPE_CHECKING:
    import pandas as pd


@dataclass
class DataSource:
    """
    Named-column data container. Domain-agnostic.

    Construct via factory classmethods, not directly. Every column is a
    1D float64 array and all columns share the same length.
    """
    _data: dict[str, NDArray[np.floating[Any]]]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Column Access ===

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in insertion order."""
        return tuple(self._data.keys())

    def keys(self) -> frozenset[str]:
        """Return the names of all available columns."""
        return frozenset(self._data.keys())

    def __getitem__(self, key: str) -> NDArray[np.floating[Any]]:
        """
        Access a named column.

        Raises:
            KeyError: If key not found, with helpful message listing available keys

        Example:
            >>> ds = DataSource.from_arrays(y=y, x1=x1)
            >>> ds['x2']  # KeyError: "DataSource has no column 'x2'. Available: ('y', 'x1')"
        """
        if key not in self._data:
            raise KeyError(
                f"DataSource has no column '{key}'. Available: {self.columns}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        """Check if a column exists."""
        return key in self._data

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of statistical units (rows)."""
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        """Source metadata (origin, path, column list)."""
        return self._metadata.copy()

    # === Factory Methods ===

    @classmethod
    def from_arrays(
        cls,
        *,
        data: NDArray | None = None,
        columns: list[str] | None = None,
        **named_arrays: NDArray,
    ) -> DataSource:
        """
        Construct from NumPy arrays.

        Either pass a 2D ``data`` matrix with matching ``columns`` names,
        or pass each column as a keyword argument (or both).
        """
        storage: dict[str, NDArray[np.floating[Any]]] = {}

        if data is not None:
            data = np.asarray(data, dtype=np.float64)
            if data.ndim != 2:
                raise DimensionError(f"data: expected 2D array, got {data.ndim}D")
            if columns is None or len(columns) != data.shape[1]:
                raise ValidationError(
                    f"columns: need {data.shape[1]} names for data, "
                    f"got {None if columns is None else len(columns)}"
                )
            for i, col in enumerate(columns):
                storage[col] = data[:, i]

        for name, arr in named_arrays.items():
            arr = np.asarray(arr, dtype=np.float64)
            if arr.ndim == 2 and arr.shape[1] == 1:
                arr = arr.ravel()
            if arr.ndim != 1:
                raise DimensionError(f"{name}: expected 1D array, got {arr.ndim}D")
            storage[name] = arr

        return cls._build(storage, {'source': 'arrays'})

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """Construct from file (CSV, TSV)."""
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, usecols=columns, sep=sep)
            return cls.from_dataframe(df, source_path=str(path))
        else:
            raise ValidationError(f"Unknown file format: {suffix}")

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """Construct from pandas DataFrame (index is ignored)."""
        storage: dict[str, NDArray[np.floating[Any]]] = {}

        for col in df.columns:
            storage[str(col)] = df[col].to_numpy(dtype=np.float64)

        metadata: dict[str, Any] = {'source': 'dataframe'}
        if source_path:
            metadata['source_path'] = source_path

        return cls._build(storage, metadata)

    @classmethod
    def _build(cls, storage: dict[str, NDArray], metadata: dict[str, Any]) -> DataSource:
        """Internal builder: enforce equal column lengths."""
        lengths = {name: arr.shape[0] for name, arr in storage.items()}
        if len(set(lengths.values())) > 1:
            details = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise DimensionError(f"Inconsistent column lengths: {details}")

        n_obs = next(iter(lengths.values()), 0)
        metadata = dict(metadata)
        metadata['n_observations'] = n_obs
        metadata['columns'] = list(storage.keys())
        return cls(_data=storage, _metadata=metadata)
