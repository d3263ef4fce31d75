"""One-line connection summary shown above the footer."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from qgo.session import SessionManager, SessionState

DISCONNECTED = "Not connected. Pick a connection from the sidebar or Ctrl+P."


def describe_state(state: SessionState) -> str:
    """Render ``state`` as ``kind user@host:(db) | tables | status``."""

    profile = state.profile
    if not state.connected:
        return f"{profile.name}: {state.status}"
    prompt = f"{profile.kind} {profile.username}@{profile.host}:({profile.database})"
    status = state.status
    if state.latency_ms is not None:
        status = f"{status} in {state.latency_ms} ms"
    at = state.refreshed_at.astimezone().strftime("%H:%M:%S")
    return f"{profile.name} | {prompt} | {len(state.tables)} tables | {status} at {at}"


class StatusBar(Static):
    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, session_manager: SessionManager) -> None:
        super().__init__(DISCONNECTED, id="status-bar")
        self._session_manager = session_manager
        self._unsubscribe: Callable[[], None] | None = None

    def on_mount(self) -> None:
        self._unsubscribe = self._session_manager.subscribe(lambda state: self.update(describe_state(state)))

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


__all__ = ["DISCONNECTED", "StatusBar", "describe_state"]
