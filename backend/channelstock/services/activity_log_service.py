# Overview: Service-layer operations for the activity log.

from __future__ import annotations

from datetime import datetime

from ..channels import Channel
from ..models import ActivityLog
from ..validation import ValidationError
from . import gateway
"""
Activity Log Invariants (authoritative)

- Append-only audit log; one entry per mutating ledger operation.
- No domain/business logic in the log itself.
- Entries are written inside the same DB transaction as the mutation they record.
- Read API is newest-first; `since` filtering is inclusive.
"""

ACTION_PRODUCT_CREATED = "Penambahan produk"
ACTION_STOCK_ADDED = "Penambahan stok"
ACTION_STOCK_DISTRIBUTED = "Pemindahan stok"
ACTION_STOCK_REDUCED = "Pengurangan stok"

MAX_LIST_LIMIT = 500


def purchase_action(channel: Channel) -> str:
    return f"Pembelian di {channel.value}"


def append_log_entry(action: str, description: str) -> ActivityLog:
    """
    Append-only log entry.

    - No domain logic here.
    - No deletes/updates of existing entries.
    """
    action = (action or "").strip()
    if not action:
        raise ValueError("log action is required")
    return gateway.insert_log_entry(action, description)


def list_log_entries(*, limit: int | None = None, since: datetime | None = None) -> list[ActivityLog]:
    """Newest-first entries; limit must be >= 1 and is capped at MAX_LIST_LIMIT."""
    if limit is not None:
        if limit < 1:
            raise ValidationError("limit must be >= 1")
        limit = min(limit, MAX_LIST_LIMIT)
    return gateway.fetch_log_entries(limit=limit, since=since)
