"""Bounded resource ledger for a drive."""
from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple


class ResourceLedger:
    """Named integer quantities, each clamped into ``[minimum, maximum]``.

    Every write goes through :meth:`set`, so an out-of-range value is never
    stored. Keys are fixed at construction; writes to unknown keys are
    ignored and reported by returning ``False``/``None``.
    """

    def __init__(
        self,
        caps: Mapping[str, int],
        values: Optional[Mapping[str, int]] = None,
        minimums: Optional[Mapping[str, int]] = None,
    ) -> None:
        minimums = minimums or {}
        self._bounds: Dict[str, Tuple[int, int]] = {
            key: (int(minimums.get(key, 0)), int(cap)) for key, cap in caps.items()
        }
        self._values: Dict[str, int] = {key: low for key, (low, _) in self._bounds.items()}
        for key, value in (values or {}).items():
            self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._bounds

    def __getitem__(self, key: str) -> int:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResourceLedger({self._values!r})"

    def get(self, key: str, default: int = 0) -> int:
        return self._values.get(key, default)

    def bounds(self, key: str) -> Tuple[int, int]:
        return self._bounds[key]

    def clamp(self, key: str, value: int) -> int:
        low, high = self._bounds[key]
        return max(low, min(high, int(value)))

    def set(self, key: str, value: int) -> bool:
        """Store ``value`` clamped into the key's bounds."""

        if key not in self._bounds:
            return False
        self._values[key] = self.clamp(key, value)
        return True

    def delta(self, key: str, amount: int) -> Optional[int]:
        """Add ``amount`` to ``key`` and return the change actually applied."""

        if key not in self._bounds:
            return None
        before = self._values[key]
        self.set(key, before + amount)
        return self._values[key] - before

    def apply(self, effects: Mapping[str, int]) -> Dict[str, int]:
        """Apply every delta in ``effects``; unknown keys are skipped."""

        applied: Dict[str, int] = {}
        for key, amount in effects.items():
            change = self.delta(key, amount)
            if change is not None:
                applied[key] = change
        return applied

    def snapshot(self) -> Dict[str, int]:
        return dict(self._values)

    def copy(self) -> "ResourceLedger":
        clone = ResourceLedger.__new__(ResourceLedger)
        clone._bounds = dict(self._bounds)
        clone._values = dict(self._values)
        return clone


__all__ = ["ResourceLedger"]
