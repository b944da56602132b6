# Overview: UTC helpers shared by models, the activity log and the API.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

# Stored datetimes are UTC with tzinfo stripped; the API speaks ISO-8601 with 'Z'.


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse the ``since`` filter of the activity log.

    Blank input means no filter. Offsets (including a trailing 'Z') are
    converted to UTC; values without an offset are already UTC.
    Raises ValueError for anything else.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    return _as_utc_naive(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Second-precision ISO-8601 string ending in 'Z'; None passes through."""
    if dt is None:
        return None
    return _as_utc_naive(dt).replace(microsecond=0).isoformat() + "Z"
