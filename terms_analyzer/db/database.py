from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Generator, Optional

DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent.parent / "data" / "terms.db"

CACHE_TTL_SECONDS = 24 * 60 * 60
PURGE_AFTER_SECONDS = 2 * CACHE_TTL_SECONDS

SCHEMA = """
CREATE TABLE IF NOT EXISTS analysis_cache (
    domain TEXT PRIMARY KEY,
    analysis_json TEXT NOT NULL,
    cached_at TEXT NOT NULL
);
"""


def _db_path() -> Path:
    env = os.environ.get("TERMS_DB_PATH")
    if env:
        return Path(env)
    return DEFAULT_DB_PATH


def _now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def get_conn(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    path = db_path or _db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: Path | None = None) -> None:
    with get_conn(db_path) as conn:
        conn.executescript(SCHEMA)


# ---------------------------------------------------------------------------
# Analysis cache
# ---------------------------------------------------------------------------


def put_cached_analysis(
    domain: str,
    analysis: dict[str, Any],
    db_path: Path | None = None,
    now: Optional[datetime] = None,
) -> datetime:
    cached_at = now or _now()
    with get_conn(db_path) as conn:
        conn.execute(
            """INSERT INTO analysis_cache (domain, analysis_json, cached_at)
               VALUES (?, ?, ?)
               ON CONFLICT(domain) DO UPDATE
               SET analysis_json = excluded.analysis_json, cached_at = excluded.cached_at""",
            (domain, json.dumps(analysis), cached_at.isoformat()),
        )
    return cached_at


def get_cached_analysis(
    domain: str,
    max_age_seconds: float = CACHE_TTL_SECONDS,
    db_path: Path | None = None,
    now: Optional[datetime] = None,
) -> dict[str, Any] | None:
    """Return the cached entry for ``domain``, deleting it if it has expired."""
    current = now or _now()
    with get_conn(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM analysis_cache WHERE domain = ?", (domain,)
        ).fetchone()
        if row is None:
            return None
        cached_at = datetime.fromisoformat(row["cached_at"])
        if current - cached_at > timedelta(seconds=max_age_seconds):
            conn.execute("DELETE FROM analysis_cache WHERE domain = ?", (domain,))
            return None
        return {
            "domain": row["domain"],
            "analysis": json.loads(row["analysis_json"]),
            "cached_at": cached_at,
            "age_seconds": (current - cached_at).total_seconds(),
        }


def delete_cached_analysis(domain: str, db_path: Path | None = None) -> bool:
    with get_conn(db_path) as conn:
        cursor = conn.execute("DELETE FROM analysis_cache WHERE domain = ?", (domain,))
        return cursor.rowcount > 0


def purge_expired(
    max_age_seconds: float = PURGE_AFTER_SECONDS,
    db_path: Path | None = None,
    now: Optional[datetime] = None,
) -> int:
    cutoff = (now or _now()) - timedelta(seconds=max_age_seconds)
    with get_conn(db_path) as conn:
        cursor = conn.execute(
            "DELETE FROM analysis_cache WHERE cached_at < ?", (cutoff.isoformat(),)
        )
        return cursor.rowcount


def count_cached(db_path: Path | None = None) -> int:
    with get_conn(db_path) as conn:
        return conn.execute("SELECT COUNT(*) FROM analysis_cache").fetchone()[0]


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


def reset_db(db_path: Path | None = None) -> None:
    with get_conn(db_path) as conn:
        conn.execute("DELETE FROM analysis_cache")
