# Overview: Row locking and bounded retry for ledger writes.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on the product row being changed.

    SQLite ignores it; Product.version_id still turns a lost update into a
    StaleDataError there.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run ``func`` (one whole ledger transaction) and retry lock or version
    conflicts with exponential backoff.

    The session is rolled back after every failure. Non-retryable errors and
    the last retryable one propagate unchanged.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except RETRYABLE_ERRORS:
            db.session.rollback()
            if attempt == attempts:
                raise
            time.sleep(backoff_base * (2 ** (attempt - 1)))
        except Exception:
            db.session.rollback()
            raise
