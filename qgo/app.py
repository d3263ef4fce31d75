"""Textual application entry point for qgo."""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Footer, Header

from .config import AppConfig, history_file, load_config, save_config
from .errors import QgoError
from .history import QueryHistory
from .providers import ProfileSwitchProvider, SessionRefreshProvider
from .session import SessionManager, SessionState
from .widgets import NavigationSidebar, PasswordPrompt, QueryPad, StatusBar

LOG = logging.getLogger(__name__)


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


class QgoApp(App[None]):
    """Interactive read-only SQL client."""

    TITLE = "qgo"
    COMMANDS = App.COMMANDS | {ProfileSwitchProvider, SessionRefreshProvider}
    CSS = """
    Screen {
        layout: vertical;
    }
    #content {
        layout: horizontal;
        height: 1fr;
    }
    #main-column {
        layout: vertical;
        padding: 1 2;
        height: 1fr;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+r", "refresh", "Refresh Metadata"),
        ("ctrl+p", "command_palette", "Command Palette"),
    ]

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        initial_profile: str | None = None,
        initial_password: str | None = None,
        exit_on_connect_failure: bool = False,
    ) -> None:
        super().__init__()
        self._config = config if config is not None else _load_app_config()
        self._session_manager = SessionManager(self._config)
        self._history = QueryHistory(self._config.settings.history_size)
        self._history.load(history_file())
        self._initial_profile = initial_profile or self._config.active_profile
        self._initial_password = initial_password
        self._exit_on_connect_failure = exit_on_connect_failure
        self._query_pad: QueryPad | None = None

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header(show_clock=True)
        self._query_pad = QueryPad(
            self._session_manager,
            history=self._history,
            max_rows=self._config.settings.max_rows_display,
        )
        yield Horizontal(
            NavigationSidebar(self._session_manager),
            Container(self._query_pad, id="main-column"),
            id="content",
        )
        yield StatusBar(self._session_manager)
        yield Footer()

    async def on_mount(self) -> None:
        if self._initial_profile:
            self.run_worker(self._connect_initial_profile(), exclusive=True)

    @property
    def session_manager(self) -> SessionManager:
        """Expose the session manager for tests and providers."""

        return self._session_manager

    @property
    def query_pad(self) -> QueryPad | None:
        return self._query_pad

    @property
    def history(self) -> QueryHistory:
        return self._history

    async def switch_profile(self, name: str, password: str | None = None) -> SessionState | None:
        """Connect to ``name``, asking for a password first when one is needed."""

        try:
            needs_password = password is None and self._session_manager.needs_password(name)
        except QgoError as exc:
            self.notify(str(exc), severity="error")
            return None
        if needs_password:
            self.push_screen(PasswordPrompt(name), callback=lambda secret: self._connect_with(name, secret))
            return None
        return await self._connect(name, password)

    async def refresh_metadata(self) -> None:
        """Invalidate and eagerly reload the table/column caches."""

        try:
            tables = await self._session_manager.refresh()
        except QgoError as exc:
            self.notify(f"Refresh failed: {exc}", severity="error")
            return
        self.notify(f"Reloaded metadata for {len(tables)} tables.", severity="information")

    def action_refresh(self) -> None:
        self.run_worker(self.refresh_metadata())

    async def _shutdown(self) -> None:
        self._history.save(history_file())
        await self._session_manager.close()
        await super()._shutdown()

    def _connect_with(self, name: str, password: str | None) -> None:
        if password is None:
            return
        self.run_worker(self._connect(name, password), exclusive=True)

    async def _connect_initial_profile(self) -> None:
        name = self._initial_profile or ""
        if self._initial_password is None or not self._exit_on_connect_failure:
            await self.switch_profile(name, self._initial_password)
            return
        if await self._connect(name, self._initial_password) is None:
            self.exit(return_code=1, message=f"Error connecting to '{name}'")

    async def _connect(self, name: str, password: str | None) -> SessionState | None:
        try:
            state = await self._session_manager.connect(name, password)
        except QgoError as exc:
            LOG.error("Error connecting to '%s': %s", name, exc)
            self.notify(str(exc), severity="error", timeout=8)
            return None
        if self._config.active_profile != state.profile.name:
            self._config = self._config.with_active_profile(state.profile.name)
            save_config(self._config)
        self.notify(f"Connected to {state.profile.kind} database.", severity="information")
        try:
            await self._session_manager.list_tables()
        except QgoError as exc:
            self.notify(f"Could not list tables: {exc}", severity="warning")
        return self._session_manager.state


__all__ = ["QgoApp"]
