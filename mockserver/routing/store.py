"""
Process-wide holder of the active rule set.

Readers take the current snapshot with a single attribute read and keep
using it for the rest of their request. Writers build a complete new rule
set first and then swap it in; replacements are serialized by a lock.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from mockserver.routing.rules import RuleSet


@dataclass(frozen=True)
class StoreSnapshot:
    """The active rule set together with its version and publish time."""
    rule_set: RuleSet
    version: int
    updated_at: datetime


class ConfigStore:
    """Copy-on-write store for the active :class:`RuleSet`."""

    def __init__(self, rule_set: RuleSet):
        self._snapshot = StoreSnapshot(
            rule_set=rule_set,
            version=1,
            updated_at=datetime.now(timezone.utc),
        )
        self._write_lock = threading.Lock()

    def current(self) -> RuleSet:
        """Return the active rule set."""
        return self._snapshot.rule_set

    def snapshot(self) -> StoreSnapshot:
        """Return the active rule set with its version, read atomically."""
        return self._snapshot

    def replace(self, rule_set: RuleSet) -> int:
        """
        Publish a new rule set, fully overwriting the previous one.

        Requests that already captured the old rule set keep using it.

        Args:
            rule_set: Fully compiled replacement

        Returns:
            The new configuration version
        """
        with self._write_lock:
            self._snapshot = StoreSnapshot(
                rule_set=rule_set,
                version=self._snapshot.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            return self._snapshot.version

    @property
    def version(self) -> int:
        return self._snapshot.version
