from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from src.domain.models.realtime import Snapshot

logger = logging.getLogger(__name__)

_EMPTY = Snapshot.empty()


@dataclass(slots=True)
class SnapshotCache:
    """Holds the current snapshot and the one before it.

    The (previous, current) pair lives in a single immutable tuple that is
    replaced by one attribute rebinding, so readers always see a whole pair
    and never wait on the writer. Only the feed poller publishes.
    """

    _pair: tuple[Snapshot, Snapshot] = field(
        default=(_EMPTY, _EMPTY), init=False, repr=False
    )

    def publish(self, snapshot: Snapshot) -> Snapshot:
        """Make `snapshot` current and demote the old current to previous.

        The latest publish always wins. A snapshot stamped earlier than the
        current one is stored with the current timestamp, so
        current.timestamp >= previous.timestamp always holds. Returns the
        snapshot as stored.
        """

        current = self._pair[1]
        if current is _EMPTY:
            # First publish: previous == current, so the first frame has no motion.
            self._pair = (snapshot, snapshot)
            return snapshot

        if snapshot.timestamp < current.timestamp:
            logger.warning(
                "Snapshot captured at %s predates current %s; holding timestamp",
                snapshot.timestamp.isoformat(),
                current.timestamp.isoformat(),
            )
            snapshot = replace(snapshot, timestamp=current.timestamp)

        self._pair = (current, snapshot)
        return snapshot

    def current(self) -> Snapshot:
        return self._pair[1]

    def previous(self) -> Snapshot:
        return self._pair[0]

    def pair(self) -> tuple[Snapshot, Snapshot]:
        """Return (previous, current) from a single consistent read."""

        return self._pair

    @property
    def has_published(self) -> bool:
        return self._pair[1] is not _EMPTY
