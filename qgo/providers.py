"""Command palette providers for core app features."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, NamedTuple

from textual.command import DiscoveryHit, Hit, Hits, Provider
from textual.types import IgnoreReturnCallbackType

from .session import SessionManager


class PaletteEntry(NamedTuple):
    label: str
    help: str
    callback: IgnoreReturnCallbackType


class _SessionProvider(Provider, ABC):
    """Base provider: subclasses list entries, matching is shared."""

    async def search(self, query: str) -> Hits:
        manager = self._session_manager
        if manager is None:
            return
        matcher = self.matcher(query)
        for entry in self.entries(manager):
            score = matcher.match(entry.label)
            if score > 0:
                yield Hit(
                    score=score,
                    match_display=matcher.highlight(entry.label),
                    command=entry.callback,
                    help=entry.help,
                )

    async def discover(self) -> Hits:
        manager = self._session_manager
        if manager is None:
            return
        for entry in self.entries(manager):
            yield DiscoveryHit(display=entry.label, command=entry.callback, help=entry.help)

    @abstractmethod
    def entries(self, manager: SessionManager) -> Iterator[PaletteEntry]:
        """Palette entries offered for the current session state."""

    @property
    def _session_manager(self) -> SessionManager | None:
        manager = getattr(self.app, "session_manager", None)
        return manager if isinstance(manager, SessionManager) else None


class ProfileSwitchProvider(_SessionProvider):
    """One "Connect to" entry per saved profile."""

    def entries(self, manager: SessionManager) -> Iterator[PaletteEntry]:
        active = manager.active_profile_name
        for profile in manager.profiles:
            suffix = " (connected)" if profile.name == active else ""
            yield PaletteEntry(
                label=f"Connect to: {profile.name}",
                help=f"Open a session for {profile.display_name}{suffix}.",
                callback=self._connect(profile.name),
            )

    def _connect(self, name: str) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            await self.app.switch_profile(name)  # type: ignore[attr-defined]

        return _run


class SessionRefreshProvider(_SessionProvider):
    """Metadata reload for the active session; hidden while disconnected."""

    def entries(self, manager: SessionManager) -> Iterator[PaletteEntry]:
        if manager.active_profile_name is None:
            return
        yield PaletteEntry(
            label="Refresh table metadata",
            help="Drop cached tables/columns and reload them (Ctrl+R).",
            callback=self._refresh,
        )

    async def _refresh(self) -> None:
        await self.app.refresh_metadata()  # type: ignore[attr-defined]


__all__ = ["PaletteEntry", "ProfileSwitchProvider", "SessionRefreshProvider"]
