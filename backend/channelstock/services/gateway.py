# Overview: Persistence gateway; the only module that queries or writes Product and ActivityLog rows.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func

from ..extensions import db
from ..models import ActivityLog, Product
from ..time_utils import utcnow
from ..validation import NotFoundError
from .concurrency import lock_for_update
"""
Gateway contract

- Functions add/flush but never commit; the calling service owns the
  transaction and commits once per operation.
- Listings are newest-first (created_at DESC, id DESC).
- update_product() only touches the fields it is given and fails on a
  missing id instead of silently inserting.
"""

PRODUCT_UPDATABLE_FIELDS = {"total_stock", "tiktok_stock", "shopee_stock", "toko_stock"}


def fetch_product(product_id: int, *, lock: bool = False) -> Product | None:
    query = db.session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query)
    return query.first()


def fetch_all_products() -> list[Product]:
    return (
        db.session.query(Product)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def product_code_exists(product_code: str) -> bool:
    return db.session.query(Product.id).filter_by(product_code=product_code).first() is not None


def next_product_sequence() -> int:
    """Sequence number for generated product codes (max id + 1)."""
    current = db.session.query(func.coalesce(func.max(Product.id), 0)).scalar()
    return int(current or 0) + 1


def insert_product(fields: dict) -> Product:
    product = Product(
        product_code=fields["product_code"],
        price=fields["price"],
        total_stock=fields["total_stock"],
        tiktok_stock=0,
        shopee_stock=0,
        toko_stock=0,
        color=fields["color"],
        created_at=utcnow(),
    )
    db.session.add(product)
    db.session.flush()  # ensures product.id is assigned without committing
    return product


def update_product(product_id: int, fields: dict, *, product: Product | None = None) -> Product:
    """
    Apply a partial update and return the row after update.

    Pass ``product`` when the caller already holds the (locked) row.
    """
    unknown = set(fields) - PRODUCT_UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields not updatable: {', '.join(sorted(unknown))}")

    if product is None:
        product = fetch_product(product_id, lock=True)
    if product is None:
        raise NotFoundError(f"product {product_id} not found")

    for key, value in fields.items():
        setattr(product, key, value)
    db.session.flush()
    return product


def insert_log_entry(action: str, description: str) -> ActivityLog:
    entry = ActivityLog(action=action, description=description, created_at=utcnow())
    db.session.add(entry)
    db.session.flush()
    return entry


def fetch_log_entries(*, limit: int | None = None, since: datetime | None = None) -> list[ActivityLog]:
    query = db.session.query(ActivityLog)
    if since is not None:
        query = query.filter(ActivityLog.created_at >= since)
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()
