"""Query history with readline-style navigation, persisted as one entry per line."""

from __future__ import annotations

import logging
from pathlib import Path

LOG = logging.getLogger(__name__)


class QueryHistory:
    """Bounded list of submitted queries and a navigation cursor."""

    def __init__(self, max_size: int = 1000) -> None:
        self._max_size = max_size
        self._entries: list[str] = []
        self._index: int | None = None

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def add(self, query: str) -> None:
        """Record ``query`` unless it is blank or repeats the last entry."""

        self._index = None
        if not query.strip() or self._max_size <= 0:
            return
        if self._entries and self._entries[-1] == query:
            return
        self._entries.append(query)
        if len(self._entries) > self._max_size:
            del self._entries[: len(self._entries) - self._max_size]

    def previous(self) -> str | None:
        """Step back in time; sticks at the oldest entry."""

        if not self._entries:
            return None
        if self._index is None:
            self._index = len(self._entries) - 1
        elif self._index > 0:
            self._index -= 1
        return self._entries[self._index]

    def next(self) -> str | None:
        """Step forward; returns ``None`` once past the newest entry."""

        if not self._entries or self._index is None:
            return None
        if self._index >= len(self._entries) - 1:
            self._index = None
            return None
        self._index += 1
        return self._entries[self._index]

    def load(self, path: Path) -> None:
        """Append the entries stored at ``path``; a missing file is an empty history."""

        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return
        except (OSError, UnicodeDecodeError) as exc:
            LOG.warning("Failed to read query history %s: %s", path, exc)
            return
        for line in lines:
            self.add(line)
        LOG.debug("Loaded %d history entries from %s", len(self._entries), path)

    def save(self, path: Path) -> None:
        """Write the (already bounded) entries to ``path``, oldest first."""

        # Entries come from a single-line input, so newlines only appear in pasted text.
        lines = [" ".join(entry.splitlines()) for entry in self._entries]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        except OSError as exc:
            LOG.warning("Failed to save query history %s: %s", path, exc)


__all__ = ["QueryHistory"]
