"""CSV and JSON writers for result sets."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from .commands import ExportFormat
from .models import ResultSet


def export_csv(result: ResultSet, path: str | Path) -> Path:
    """Write the header row and every data row to ``path``."""

    target = Path(path)
    with target.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(result.columns)
        writer.writerows(result.rows)
    return target


def export_json(result: ResultSet, path: str | Path) -> Path:
    """Write an array of ``{column: value}`` objects to ``path``."""

    target = Path(path)
    target.write_text(json.dumps(result.as_records(), indent=2, ensure_ascii=False), encoding="utf-8")
    return target


def export_result(result: ResultSet, path: str | Path, export_format: ExportFormat) -> Path:
    if export_format is ExportFormat.CSV:
        return export_csv(result, path)
    return export_json(result, path)


__all__ = ["export_csv", "export_json", "export_result"]
