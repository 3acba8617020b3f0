from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreContentionError, TransientStoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)
_LOCK_CONFLICT_ERRNOS = (errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection, yield ``(conn, cursor)`` and commit on success.

    Any exception rolls the transaction back. Connection-level driver errors
    are re-raised as ``TransientStoreError``; deadlocks and lock wait
    timeouts as its ``StoreContentionError`` subclass.
    """

    try:
        conn = conn_factory.connect()
    except _TRANSIENT_ERRORS as e:
        raise TransientStoreError("Database is unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception as e:
        _safe_rollback(conn)
        if is_lock_conflict(e):
            raise StoreContentionError("Transaction aborted by a lock conflict; rolled back") from e
        if isinstance(e, _TRANSIENT_ERRORS):
            raise TransientStoreError("Database connection lost; transaction rolled back") from e
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except _TRANSIENT_ERRORS:
        # The server aborts the transaction itself when the connection is gone.
        logger.warning("rollback failed on a broken connection")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(error: Exception, key_name: Optional[str] = None) -> bool:
    """True if ``error`` is a MySQL duplicate-key violation (optionally on ``key_name``)."""

    if not isinstance(error, mysql.connector.errors.IntegrityError):
        return False
    if getattr(error, "errno", None) != errorcode.ER_DUP_ENTRY:
        return False
    if key_name is None:
        return True
    return key_name in str(getattr(error, "msg", "") or error)


def is_lock_conflict(error: Exception) -> bool:
    """True for InnoDB deadlocks (1213) and lock wait timeouts (1205)."""
    if not isinstance(error, mysql.connector.errors.Error):
        return False
    return getattr(error, "errno", None) in _LOCK_CONFLICT_ERRNOS


def to_json(value: Optional[dict]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, sort_keys=True, default=str)


def from_json(value: Any) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)
