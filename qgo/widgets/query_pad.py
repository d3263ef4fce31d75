"""Query pad: input line, meta-command dispatch, and the results grid."""

from __future__ import annotations

from typing import Awaitable, Callable, Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import DataTable, Input, Static

from qgo.commands import (
    HELP_TEXT,
    Command,
    CommandError,
    CommandKind,
    app_version,
    parse_command,
)
from qgo.errors import QgoError
from qgo.export import export_result
from qgo.history import QueryHistory
from qgo.models import ResultSet
from qgo.session import SessionManager


class QueryPad(Container):
    """Runs shell input against the session manager and renders the outcome."""

    DEFAULT_CSS = """
    QueryPad {
        layout: vertical;
        border: round $primary 40%;
        padding: 1 2;
        height: 1fr;
        background: $surface;
    }

    QueryPad .panel-title {
        text-style: bold;
    }

    QueryPad Input {
        border: heavy $primary;
    }

    QueryPad:focus-within {
        border: round $primary;
    }

    #query-status {
        height: auto;
        margin-top: 1;
    }

    #query-help {
        height: auto;
        color: $text-muted;
    }

    #query-results {
        height: 1fr;
        margin-top: 1;
        border-top: solid $surface-darken-2;
    }
    """

    def __init__(
        self,
        session_manager: SessionManager,
        *,
        history: QueryHistory | None = None,
        max_rows: int | None = None,
    ) -> None:
        super().__init__(id="query-pad")
        self._session_manager = session_manager
        self._history = history or QueryHistory()
        self._max_rows = max_rows
        self._status_panel: Static | None = None
        self._help_panel: Static | None = None
        self._result_table: DataTable | None = None
        self._status_message = ""
        self._handlers: dict[CommandKind, Callable[[Command], Awaitable[None]]] = {
            CommandKind.QUERY: self._run_query,
            CommandKind.TABLES: self._show_tables,
            CommandKind.DESCRIBE: self._describe_table,
            CommandKind.EXPORT: self._export,
            CommandKind.HELP: self._show_help,
            CommandKind.CLEAR: self._clear,
            CommandKind.VERSION: self._show_version,
            CommandKind.EXIT: self._exit,
        }

    def compose(self) -> ComposeResult:
        yield Static("Query", classes="panel-title")
        yield _QueryInput(
            self._history,
            placeholder="Type SQL or 'help', e.g. SELECT * FROM users LIMIT 10",
            id="query-input",
        )
        yield Static("", id="query-status")
        yield Static("", id="query-help")
        yield DataTable(id="query-results", zebra_stripes=True)

    async def on_mount(self) -> None:
        self._status_panel = self.query_one("#query-status", Static)
        self._help_panel = self.query_one("#query-help", Static)
        self._help_panel.display = False
        self._result_table = self.query_one("#query-results", DataTable)
        self._result_table.cursor_type = "row"

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        line = event.value
        event.input.value = ""
        await self.submit(line)

    async def submit(self, line: str) -> None:
        """Handle one line of input the way the interactive shell would."""

        text = line.strip()
        if not text:
            return
        self._history.add(text)
        try:
            command = parse_command(text)
        except CommandError as exc:
            self._set_status(str(exc), severity="warning")
            return
        try:
            await self._handlers[command.kind](command)
        except (QgoError, OSError) as exc:
            self._set_status(f"Error: {exc}", severity="error")

    async def _run_query(self, command: Command) -> None:
        self._set_status("Executing…", severity="information")
        result = await self._session_manager.run_query(command.text)
        self._render_result(result)
        if result.is_empty():
            self._set_status("Query returned no results.", severity="information")
            return
        message = f"Rows returned: {result.row_count}"
        if self._max_rows is not None and result.row_count > self._max_rows:
            message += (
                f" ... and {result.row_count - self._max_rows} more rows"
                f" (showing first {self._max_rows})"
            )
        self._set_status(message, severity="success")

    async def _show_tables(self, command: Command) -> None:
        tables = await self._session_manager.list_tables()
        names = [table.value for table in tables]
        self._render_listing("Tables", names)
        if not names:
            self._set_status("No tables found.", severity="information")
        else:
            self._set_status(f"Tables: {len(names)}", severity="success")

    async def _describe_table(self, command: Command) -> None:
        table = command.table or ""
        columns = await self._session_manager.describe(table)
        self._render_listing(f"Columns in table '{table}'", list(columns))
        if not columns:
            self._set_status(f"Table '{table}' not found or has no columns.", severity="warning")
        else:
            self._set_status(f"Columns: {len(columns)}", severity="success")

    async def _export(self, command: Command) -> None:
        result = await self._session_manager.run_query(command.text)
        if command.filename is None or command.export_format is None:
            return
        path = export_result(result, command.filename, command.export_format)
        self._set_status(f"Results exported to: {path}", severity="success")

    async def _show_help(self, command: Command) -> None:
        if self._help_panel:
            self._help_panel.update(HELP_TEXT)
            self._help_panel.display = True

    async def _clear(self, command: Command) -> None:
        if self._result_table:
            self._result_table.clear(columns=True)
        if self._help_panel:
            self._help_panel.display = False
        self._set_status("", severity="information")

    async def _show_version(self, command: Command) -> None:
        self._set_status(f"qgo version {app_version()}", severity="information")

    async def _exit(self, command: Command) -> None:
        self.app.exit()

    def _render_result(self, result: ResultSet) -> None:
        if not self._result_table:
            return
        if self._help_panel:
            self._help_panel.display = False
        self._result_table.clear(columns=True)
        if not result.columns:
            return
        self._result_table.add_columns(*result.columns)
        rows = result.rows if self._max_rows is None else result.rows[: self._max_rows]
        self._result_table.add_rows(rows)

    def _render_listing(self, title: str, values: Sequence[str]) -> None:
        if not self._result_table:
            return
        if self._help_panel:
            self._help_panel.display = False
        self._result_table.clear(columns=True)
        self._result_table.add_column(title)
        self._result_table.add_rows([(value,) for value in values])

    def _set_status(self, message: str, *, severity: str) -> None:
        self._status_message = message
        if not self._status_panel:
            return
        if not message:
            self._status_panel.update("")
            return
        prefix = {
            "information": "ℹ",
            "warning": "⚠",
            "error": "✖",
            "success": "✔",
        }.get(severity, "•")
        self._status_panel.update(f"{prefix} {message}")

    @property
    def status_message(self) -> str:
        """Last status message without its severity badge (testing helper)."""

        return self._status_message


class _QueryInput(Input):
    """Input that walks the query history with Up/Down."""

    BINDINGS = Input.BINDINGS + [
        Binding("up", "history_previous", "Previous query", show=False),
        Binding("down", "history_next", "Next query", show=False),
    ]

    def __init__(self, history: QueryHistory, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)
        self._history = history

    def action_history_previous(self) -> None:
        entry = self._history.previous()
        if entry is not None:
            self.value = entry
            self.cursor_position = len(entry)

    def action_history_next(self) -> None:
        entry = self._history.next()
        self.value = entry or ""
        self.cursor_position = len(self.value)


__all__ = ["QueryPad"]
