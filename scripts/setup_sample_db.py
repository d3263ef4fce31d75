"""Create a small sample SQLite database and register a qgo profile for it."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from qgo.config import CONFIG_FILE, ConnectionProfileConfig, load_config, save_config
from qgo.models import DatabaseKind

DEFAULT_PATH = Path.home() / ".local" / "share" / "qgo" / "sample.db"
PROFILE_NAME = "Sample SQLite"

SEED_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS orders (
    id INTEGER PRIMARY KEY,
    account_id INTEGER REFERENCES accounts(id),
    total REAL NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    note TEXT
);
INSERT OR IGNORE INTO accounts (id, email) VALUES
    (1, 'anna@example.com'),
    (2, 'ben@example.com'),
    (3, 'cara@example.com');
INSERT OR IGNORE INTO orders (id, account_id, total, status, note) VALUES
    (1, 1, 19.99, 'complete', NULL),
    (2, 1, 5.00, 'pending', 'gift'),
    (3, 3, 42.50, 'complete', NULL);
"""


def seed_database(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.executescript(SEED_SQL)
    print(f"Seeded sample database at {path}.")


def update_config(path: Path) -> None:
    config = load_config()
    if config.profile_by_name(PROFILE_NAME) is not None:
        print(f"Profile '{PROFILE_NAME}' already present in config; leaving as-is.")
        return
    profile = ConnectionProfileConfig(name=PROFILE_NAME, kind=DatabaseKind.SQLITE, database=str(path))
    save_config(config.with_profile(profile))
    print(f"Added '{PROFILE_NAME}' profile to {CONFIG_FILE}.")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--path", type=Path, default=DEFAULT_PATH, help="Where to write the SQLite file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    path = args.path.expanduser().resolve()
    seed_database(path)
    update_config(path)
    print(f"Sample database is ready. Run: qgo -c '{PROFILE_NAME}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
