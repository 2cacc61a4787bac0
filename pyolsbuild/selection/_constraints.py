"""
Inclusion and exclusion constraints on predictor subsets.

Names may be given as strings or as 0-based integer positions in the
declared predictor order. Resolution happens once, at construction;
the engines only ever see names.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pyolsbuild.core.exceptions import ConfigurationError


def _resolve(
    items: str | int | Iterable[str | int] | None,
    order: tuple[str, ...],
    name: str,
) -> frozenset[str]:
    if items is None:
        return frozenset()
    if isinstance(items, (str, int)):
        items = [items]

    resolved = set()
    for item in items:
        if isinstance(item, bool):
            raise ConfigurationError(f"{name}: expected predictor name or index, got {item!r}")
        if isinstance(item, int):
            if not 0 <= item < len(order):
                raise ConfigurationError(
                    f"{name}: index {item} out of range for {len(order)} predictors"
                )
            resolved.add(order[item])
        elif isinstance(item, str):
            if item not in order:
                raise ConfigurationError(
                    f"{name}: unknown predictor {item!r}. Available: {list(order)}"
                )
            resolved.add(item)
        else:
            raise ConfigurationError(
                f"{name}: expected predictor name or index, got {type(item).__name__}"
            )
    return frozenset(resolved)


@dataclass(frozen=True)
class ConstraintSet:
    """
    Predictors forced into, and barred from, every candidate model.

    Invariants:
        included ∩ excluded = ∅
        included, excluded ⊆ order
    """
    order: tuple[str, ...]
    included: frozenset[str] = frozenset()
    excluded: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        overlap = self.included & self.excluded
        if overlap:
            raise ConfigurationError(
                f"include/exclude: {sorted(overlap, key=self.rank)} both included and excluded"
            )
        unknown = (self.included | self.excluded) - set(self.order)
        if unknown:
            raise ConfigurationError(
                f"include/exclude: unknown predictor(s) {sorted(unknown)}. "
                f"Available: {list(self.order)}"
            )

    @classmethod
    def build(
        cls,
        order: Sequence[str],
        include: str | int | Iterable[str | int] | None = None,
        exclude: str | int | Iterable[str | int] | None = None,
    ) -> ConstraintSet:
        """Resolve names or indices against the declared order."""
        order = tuple(order)
        return cls(
            order=order,
            included=_resolve(include, order, 'include'),
            excluded=_resolve(exclude, order, 'exclude'),
        )

    def rank(self, name: str) -> int:
        """Position of a predictor in the declared order."""
        return self.order.index(name)

    def ordered(self, names: Iterable[str]) -> tuple[str, ...]:
        """Names sorted into declared order."""
        return tuple(sorted(names, key=self.rank))

    @property
    def included_ordered(self) -> tuple[str, ...]:
        return self.ordered(self.included)

    @property
    def allowed(self) -> tuple[str, ...]:
        """Every predictor that may appear in a model, in declared order."""
        return tuple(v for v in self.order if v not in self.excluded)

    @property
    def free(self) -> tuple[str, ...]:
        """Predictors the search may add or remove, in declared order."""
        return tuple(
            v for v in self.order if v not in self.excluded and v not in self.included
        )

    def admits(self, predictors: Iterable[str]) -> bool:
        """Whether a predictor set honours both constraints."""
        members = set(predictors)
        return self.included <= members and not (members & self.excluded)
