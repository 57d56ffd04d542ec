"""Deduplicated run collection."""

import logging
from typing import Iterable, Sequence

from metrics.models import Run

logger = logging.getLogger(__name__)


def merge(existing: Sequence[Run], incoming: Sequence[Run]) -> tuple[Run, ...]:
    """Merge a new batch into the known runs.

    Existing runs come first, so the earliest-ingested record wins when ids
    collide (file imports are ingested before API batches). Order is the
    concatenation order with later duplicates removed.
    """
    seen: set[str] = set()
    merged = []

    for run in [*existing, *incoming]:
        if run.id in seen:
            continue
        seen.add(run.id)
        merged.append(run)

    return tuple(merged)


class RunStore:
    """Accumulated runs across ingestion events.

    Owned by the caller and threaded explicitly between calls.
    """

    def __init__(self, runs: Iterable[Run] = ()):
        self._runs: tuple[Run, ...] = merge((), tuple(runs))

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self):
        return iter(self._runs)

    def __contains__(self, run_id: str) -> bool:
        return any(run.id == run_id for run in self._runs)

    def __repr__(self) -> str:
        return f"<RunStore {len(self._runs)} runs>"

    @property
    def runs(self) -> tuple[Run, ...]:
        return self._runs

    def add(self, incoming: Sequence[Run], source: str | None = None) -> tuple[Run, ...]:
        """Merge a batch and make the result the new known set."""
        before = len(self._runs)
        self._runs = merge(self._runs, incoming)
        added = len(self._runs) - before

        logger.info(
            "Merged %d runs%s: %d new, %d duplicates, %d total",
            len(incoming),
            f" from {source}" if source else "",
            added,
            len(incoming) - added,
            len(self._runs),
        )
        return self._runs

    def get(self, run_id: str) -> Run | None:
        for run in self._runs:
            if run.id == run_id:
                return run
        return None

    def clear(self) -> None:
        self._runs = ()
