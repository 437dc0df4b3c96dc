"""
StatsAggregator — in-memory counters for the current delivery window.

Three category totals plus identifier → count. Only ever incremented,
snapshotted, reset (after a confirmed delivery) or restored from the spool.
Every access goes through one re-entrant lock; the delivery path holds it
for a whole flush so capture and flush never interleave.
"""

import threading
from dataclasses import dataclass, field
from types import MappingProxyType

from ..classifier import event_type, KEY, CLICK, WHEEL

_TOTAL_FIELDS = ("total_keys", "total_clicks", "total_wheels")


@dataclass(frozen=True)
class Snapshot:
    """Accumulated deltas since the last successful delivery. Immutable."""

    total_keys: int = 0
    total_clicks: int = 0
    total_wheels: int = 0
    events: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.events, MappingProxyType):
            object.__setattr__(self, "events", MappingProxyType(dict(self.events)))

    @property
    def is_empty(self):
        return not (self.total_keys or self.total_clicks or self.total_wheels
                    or any(self.events.values()))

    def to_dict(self):
        """Wire / spool representation."""
        return {
            "total_keys": self.total_keys,
            "total_clicks": self.total_clicks,
            "total_wheels": self.total_wheels,
            "events": dict(self.events),
        }

    @classmethod
    def from_dict(cls, data):
        """Parse the wire shape. Raises ValueError on anything malformed."""
        if not isinstance(data, dict):
            raise ValueError("snapshot must be a JSON object")
        totals = {}
        for name in _TOTAL_FIELDS:
            totals[name] = _count(data.get(name), name)
        events = data.get("events")
        if not isinstance(events, dict):
            raise ValueError("snapshot 'events' must be an object")
        parsed = {}
        for identifier, count in events.items():
            if not isinstance(identifier, str) or not identifier:
                raise ValueError(f"invalid event identifier: {identifier!r}")
            parsed[identifier] = _count(count, identifier)
        return cls(events=parsed, **totals)


def _count(value, name):
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


class StatsAggregator:
    """Category totals + per-identifier counts, guarded by a single lock."""

    def __init__(self):
        self.lock = threading.RLock()
        self._totals = {KEY: 0, CLICK: 0, WHEEL: 0}
        self._events = {}

    def record(self, identifier, delta=1):
        """Add delta to the identifier and to its category total."""
        if delta < 0:
            raise ValueError(f"delta must be non-negative, got {delta}")
        if delta == 0:
            return
        category = event_type(identifier)
        with self.lock:
            self._events[identifier] = self._events.get(identifier, 0) + delta
            if category in self._totals:
                self._totals[category] += delta

    def snapshot(self):
        with self.lock:
            return Snapshot(
                total_keys=self._totals[KEY],
                total_clicks=self._totals[CLICK],
                total_wheels=self._totals[WHEEL],
                events=dict(self._events),
            )

    def reset(self):
        """Zero everything. Only after a confirmed delivery."""
        with self.lock:
            self._totals = {KEY: 0, CLICK: 0, WHEEL: 0}
            self._events = {}

    def restore(self, snapshot):
        """
        Fold a spooled snapshot back in (startup).
        Totals are re-derived from the identifiers, not copied.
        """
        with self.lock:
            for identifier, count in snapshot.events.items():
                self.record(identifier, count)
