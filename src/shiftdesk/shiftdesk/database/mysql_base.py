from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, roll back and re-raise on error.

    Duplicate-key errors and SIGNAL SQLSTATE 45000 errors are re-raised as ConflictError
    so callers can count them as skips instead of failures.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        raise ConflictError(str(exc)) from exc
    except mysql.connector.DatabaseError as exc:
        conn.rollback()
        if getattr(exc, "sqlstate", None) == "45000" or exc.errno == errorcode.ER_SIGNAL_EXCEPTION:
            raise ConflictError(str(exc)) from exc
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[object]) -> str:
    """Placeholder list for `IN (...)`; callers must not pass an empty sequence."""
    return ",".join(["%s"] * len(values))


def bounds_clause(column: str, lower: Any = None, upper: Any = None) -> Tuple[str, Tuple[Any, ...]]:
    """`AND` filter for ``lower <= column < upper``; a missing bound is left open."""
    sql, params = "", ()
    if lower is not None:
        sql += f" AND {column}>=%s"
        params += (lower,)
    if upper is not None:
        sql += f" AND {column}<%s"
        params += (upper,)
    return sql, params


def dump_json(value: Optional[dict]) -> Optional[str]:
    return json.dumps(value, ensure_ascii=False, default=str) if value is not None else None


def load_json(value: Any) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
