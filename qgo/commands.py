"""Parsing of the shell's meta-commands versus plain SQL."""

from __future__ import annotations

import importlib.metadata as metadata
from dataclasses import dataclass
from enum import Enum


class CommandKind(str, Enum):
    """What a line of shell input asks for."""

    QUERY = "query"
    EXIT = "exit"
    HELP = "help"
    CLEAR = "clear"
    VERSION = "version"
    TABLES = "tables"
    DESCRIBE = "describe"
    EXPORT = "export"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class CommandError(ValueError):
    """Raised for malformed meta-commands."""


EXPORT_USAGE = (
    "Usage: export <format> <filename> <query>\n"
    "Example: export csv results.csv SELECT * FROM users"
)

_ALIASES = {
    "exit": CommandKind.EXIT,
    "quit": CommandKind.EXIT,
    "\\q": CommandKind.EXIT,
    "help": CommandKind.HELP,
    "\\h": CommandKind.HELP,
    "clear": CommandKind.CLEAR,
    "\\c": CommandKind.CLEAR,
    "version": CommandKind.VERSION,
    "\\v": CommandKind.VERSION,
    "tables": CommandKind.TABLES,
    "\\dt": CommandKind.TABLES,
}

_DESCRIBE_PREFIXES = ("describe ", "\\d ")

HELP_TEXT = """\
SQL Commands:
  SELECT, SHOW, DESCRIBE, EXPLAIN, WITH  - Execute read-only SQL queries

Special Commands:
  help, \\h                      - Show this help message
  exit, quit, \\q                - Exit the program
  clear, \\c                     - Clear the results
  version, \\v                   - Show version information
  tables, \\dt                   - List all tables
  describe <table>, \\d <table>  - Describe table structure

Export Commands:
  export csv <file> <query>     - Export query results to CSV
  export json <file> <query>    - Export query results to JSON

Keys:
  Enter                         - Run the input
  Up/Down                       - Navigate query history
  Ctrl+R                        - Refresh table metadata
  Ctrl+C                        - Quit"""


@dataclass(frozen=True, slots=True)
class Command:
    """One parsed line of input."""

    kind: CommandKind
    text: str = ""
    table: str | None = None
    export_format: ExportFormat | None = None
    filename: str | None = None


def app_version() -> str:
    try:
        return metadata.version("qgo")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def parse_command(line: str) -> Command:
    """Classify ``line``; anything that is not a meta-command is a query."""

    text = line.strip()
    lowered = text.lower()
    alias = _ALIASES.get(lowered)
    if alias is not None:
        return Command(kind=alias, text=text)
    for prefix in _DESCRIBE_PREFIXES:
        if lowered.startswith(prefix):
            table = text[len(prefix):].strip()
            if table:
                return Command(kind=CommandKind.DESCRIBE, text=text, table=table)
    if lowered.startswith("export ") or lowered == "export":
        return _parse_export(text)
    return Command(kind=CommandKind.QUERY, text=text)


def _parse_export(text: str) -> Command:
    parts = text[len("export"):].strip().split(None, 2)
    if len(parts) != 3:
        raise CommandError(EXPORT_USAGE)
    fmt, filename, query = parts
    try:
        export_format = ExportFormat(fmt.lower())
    except ValueError:
        raise CommandError("Unsupported export format. Use 'csv' or 'json'.") from None
    return Command(
        kind=CommandKind.EXPORT,
        text=query,
        export_format=export_format,
        filename=filename,
    )


__all__ = [
    "Command",
    "CommandError",
    "CommandKind",
    "EXPORT_USAGE",
    "ExportFormat",
    "HELP_TEXT",
    "app_version",
    "parse_command",
]
