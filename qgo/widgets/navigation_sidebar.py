"""Sidebar widget listing saved profiles and the active database's tables."""

from __future__ import annotations

from typing import Callable

from textual import on
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import Label, ListItem, ListView, Static

from qgo.session import SessionManager, SessionState

MAX_LISTED_TABLES = 50


class NavigationSidebar(Container):
    """Displays the saved profiles and the tables reported by the active session."""

    DEFAULT_CSS = """
    NavigationSidebar {
        width: 30;
        min-width: 22;
        border-right: solid $surface-darken-1;
        padding: 1;
        height: 1fr;
        background: $surface-darken-2;
    }

    NavigationSidebar .sidebar-heading {
        text-style: bold;
        margin-bottom: 1;
    }

    #profile-list {
        height: 8;
        border: round $primary 30%;
        margin-bottom: 1;
    }

    #profile-list .active {
        text-style: bold;
    }

    #profile-summary {
        color: $text-muted;
        min-height: 4;
        margin-bottom: 1;
    }
    """

    def __init__(self, session_manager: SessionManager) -> None:
        super().__init__(id="nav-sidebar")
        self._session_manager = session_manager
        self._profile_items: dict[str, _ProfileListItem] = {}
        self._profile_list: ListView | None = None
        self._profile_summary: Static | None = None
        self._tables: Static | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Static("Connections", classes="sidebar-heading")
        items = [_ProfileListItem(profile.name, profile.display_name) for profile in self._session_manager.profiles]
        self._profile_items = {item.profile_name: item for item in items}
        self._profile_list = ListView(*items, id="profile-list")
        yield self._profile_list
        self._profile_summary = Static("Not connected.", id="profile-summary")
        yield self._profile_summary
        yield Static("Tables", classes="sidebar-heading")
        self._tables = Static("No tables loaded.", id="table-list")
        yield self._tables

    async def on_mount(self) -> None:
        self._unsubscribe = self._session_manager.subscribe(self._handle_session_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_session_update(self, state: SessionState) -> None:
        self._render_connections(state)
        self._render_summary(state)
        self._render_tables(state)

    def _render_connections(self, state: SessionState) -> None:
        for name, item in self._profile_items.items():
            item.set_class(state.connected and name == state.profile.name, "active")

    def _render_summary(self, state: SessionState) -> None:
        if not self._profile_summary:
            return
        profile = state.profile
        self._profile_summary.update(
            "\n".join(
                [
                    f"Type: {profile.kind}",
                    f"Host: {profile.host}:{profile.port}",
                    f"Database: {profile.database or '-'}",
                    f"Status: {state.status}",
                ]
            )
        )

    def _render_tables(self, state: SessionState) -> None:
        if not self._tables:
            return
        if not state.tables:
            self._tables.update("No tables loaded.")
            return
        lines = [f"  {name}" for name in state.tables[:MAX_LISTED_TABLES]]
        hidden = len(state.tables) - MAX_LISTED_TABLES
        if hidden > 0:
            lines.append(f"  ... and {hidden} more")
        self._tables.update("\n".join(lines))

    @on(ListView.Selected, "#profile-list")
    async def _handle_profile_selected(self, event: ListView.Selected) -> None:
        item = event.item
        if not isinstance(item, _ProfileListItem):
            return
        event.stop()
        switcher = getattr(self.app, "switch_profile", None)
        if switcher is not None:
            await switcher(item.profile_name)


class _ProfileListItem(ListItem):
    """List item storing a profile name for selection callbacks."""

    def __init__(self, name: str, label: str) -> None:
        super().__init__(Label(label))
        self.profile_name = name


__all__ = ["NavigationSidebar"]
