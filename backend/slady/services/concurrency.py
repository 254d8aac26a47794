# Overview: Transaction helpers shared by every mutating service call.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

RETRYABLE = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Row-level lock for read-validate-write sequences.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the Item version
    counter catches the lost update instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on: tuple = ()):
    """
    Run one unit of work (read, validate, write, commit) and retry it from
    the top when the database reports a lock or version conflict, or when
    it raises one of the extra `retry_on` exceptions.

    Any other exception rolls the session back and propagates, so a failed
    operation never leaves half its writes behind.
    """
    retryable = RETRYABLE + tuple(retry_on)
    for attempt in range(attempts):
        try:
            return func()
        except retryable:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
