# Overview: Inventory ledger; owns product stock pools and channel allocations.

# backend/channelstock/services/inventory_service.py

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..channels import Channel, parse_channel
from ..colors import build_product_code, color_display_name, normalize_color
from ..extensions import db
from ..models import Product
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_int,
    enforce_rules_product,
)
from . import gateway
from .activity_log_service import (
    ACTION_PRODUCT_CREATED,
    ACTION_STOCK_ADDED,
    ACTION_STOCK_DISTRIBUTED,
    ACTION_STOCK_REDUCED,
    append_log_entry,
    purchase_action,
)
from .concurrency import run_with_retry
"""
Inventory Ledger Invariants (authoritative)

Stock model:
- total_stock is the unallocated warehouse pool.
- channel stocks (tiktok/shopee/toko) are allocations available for sale.
- total_stock >= 0 and every channel stock >= 0, always.

Operations:
- distribute moves units from total_stock into channel stocks; the sum must be
  > 0 and <= total_stock read under lock, otherwise nothing changes.
- add_stock increases total_stock by a positive amount; no upper bound.
- reduce_stock takes a positive amount out of total_stock; it must be
  <= total_stock read under lock, otherwise nothing changes.
- decrement re-reads the channel stock under lock, re-checks sufficiency and
  writes fresh - amount.

Audit:
- Every mutation appends exactly one ActivityLog entry in the same transaction.
"""


class InvalidAmountError(ValidationError):
    """Stock amount is not a positive integer."""


class NoOpError(ValidationError):
    """Distribution would move zero units."""


class CapacityExceededError(ConflictError):
    """Requested quantity is larger than the pool it is taken from."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class StockMovement:
    product_id: int
    product_code: str
    channel: Channel
    amount: int
    before: int
    after: int
    log_entry_id: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_code": self.product_code,
            "channel": self.channel.value,
            "amount": self.amount,
            "before": self.before,
            "after": self.after,
            "log_entry_id": self.log_entry_id,
        }


def _require_product(product_id: int, *, lock: bool = False) -> Product:
    product = gateway.fetch_product(product_id, lock=lock)
    if product is None:
        raise NotFoundError(f"product {product_id} not found")
    return product


def get_product(product_id: int) -> Product:
    return _require_product(product_id)


def list_products() -> list[Product]:
    """All products, newest-created first."""
    return gateway.fetch_all_products()


def create_product(
    *,
    price,
    total_stock,
    color,
    product_code: str | None = None,
    code_prefix: str = "",
) -> Product:
    """
    Create a product with every channel stock at 0.

    product_code is generated from the next sequence number and the colour's
    palette index when the caller does not supply one.
    """
    patch = {
        "price": coerce_int("price", price),
        "total_stock": coerce_int("total_stock", total_stock),
    }
    enforce_rules_product(patch)
    color_key = normalize_color(color)

    def _op():
        code = (product_code or "").strip()
        if not code:
            code = build_product_code(gateway.next_product_sequence(), color_key, code_prefix)

        if gateway.product_code_exists(code):
            raise ConflictError(f"product code {code} already exists")

        try:
            product = gateway.insert_product({
                "product_code": code,
                "price": patch["price"],
                "total_stock": patch["total_stock"],
                "color": color_key,
            })
        except IntegrityError:
            raise ConflictError(f"product code {code} already exists")

        append_log_entry(
            ACTION_PRODUCT_CREATED,
            f"Produk {product.product_code} ditambahkan: warna {color_display_name(color_key)} "
            f"({color_key}), harga {product.price}, stok gudang {product.total_stock}",
        )

        db.session.commit()
        current_app.logger.info("Created product %s (id=%s)", product.product_code, product.id)
        return product

    return run_with_retry(_op)


def _parse_allocations(allocations: dict) -> dict[Channel, int]:
    if not isinstance(allocations, dict):
        raise ValidationError("allocations must be an object of channel -> quantity")

    parsed: dict[Channel, int] = {}
    for key, raw in allocations.items():
        channel = parse_channel(key)
        if channel in parsed:
            raise ValidationError(f"duplicate allocation for {channel.value}")
        qty = 0 if raw is None else coerce_int(channel.value, raw)
        if qty < 0:
            raise ValidationError(f"{channel.value} allocation must be >= 0")
        parsed[channel] = qty
    return parsed


def distribute_stock(product_id: int, allocations: dict) -> Product:
    """
    Move units from the warehouse pool into channel allocations.

    Raises NoOpError when nothing would move and CapacityExceededError when the
    allocations add up to more than the current total_stock. Neither case
    mutates the product.
    """
    parsed = _parse_allocations(allocations)
    requested = sum(parsed.values())
    if requested == 0:
        raise NoOpError("allocation total must be greater than 0")

    def _op():
        product = _require_product(product_id, lock=True)

        if requested > product.total_stock:
            raise CapacityExceededError(
                "allocation exceeds available warehouse stock",
                details={
                    "product_id": product.id,
                    "requested": requested,
                    "available": product.total_stock,
                },
            )

        fields = {"total_stock": product.total_stock - requested}
        for channel, qty in parsed.items():
            if qty:
                fields[channel.stock_column] = product.channel_stock(channel) + qty
        gateway.update_product(product.id, fields, product=product)

        moved = ", ".join(f"{c.value} +{q}" for c, q in parsed.items() if q)
        append_log_entry(
            ACTION_STOCK_DISTRIBUTED,
            f"Stok {product.product_code} dipindahkan ({moved}). "
            f"Stok gudang {product.total_stock}; tiktok {product.tiktok_stock}, "
            f"shopee {product.shopee_stock}, toko {product.toko_stock}",
        )

        db.session.commit()
        current_app.logger.info("Distributed %s units of product %s", requested, product.id)
        return product

    return run_with_retry(_op)


def _parse_amount(amount) -> int:
    try:
        qty = coerce_int("amount", amount)
    except ValidationError as e:
        raise InvalidAmountError(str(e))
    if qty <= 0:
        raise InvalidAmountError("amount must be > 0")
    return qty


def add_stock(product_id: int, amount) -> Product:
    """Increase the warehouse pool by a positive amount."""
    qty = _parse_amount(amount)

    def _op():
        product = _require_product(product_id, lock=True)
        gateway.update_product(product.id, {"total_stock": product.total_stock + qty}, product=product)

        append_log_entry(
            ACTION_STOCK_ADDED,
            f"Stok {product.product_code} ditambah {qty}, total stok gudang sekarang {product.total_stock}",
        )

        db.session.commit()
        current_app.logger.info("Added %s units to product %s", qty, product.id)
        return product

    return run_with_retry(_op)


def reduce_stock(product_id: int, amount) -> Product:
    """
    Take units straight out of the warehouse pool (a purchase recorded
    outside the channel carts).

    Raises CapacityExceededError, without changing anything, when the amount
    is larger than the current total_stock.
    """
    qty = _parse_amount(amount)

    def _op():
        product = _require_product(product_id, lock=True)
        before = product.total_stock

        if qty > before:
            raise CapacityExceededError(
                "not enough stock",
                details={
                    "product_id": product.id,
                    "requested": qty,
                    "available": before,
                },
            )

        gateway.update_product(product.id, {"total_stock": before - qty}, product=product)

        append_log_entry(
            ACTION_STOCK_REDUCED,
            f"Stok {product.product_code} dikurangi {qty}: stok gudang {before} -> {product.total_stock}",
        )

        db.session.commit()
        current_app.logger.info("Reduced product %s warehouse stock by %s", product.id, qty)
        return product

    return run_with_retry(_op)


def _decrement_channel_stock_inner(product_id: int, channel: Channel, amount: int) -> StockMovement:
    """Core decrement without retry or commit.

    Called by both the public decrement_channel_stock() and checkout.
    """
    product = _require_product(product_id, lock=True)
    before = product.channel_stock(channel)

    if amount > before:
        raise CapacityExceededError(
            f"not enough {channel.value} stock for product {product.product_code}",
            details={
                "product_id": product.id,
                "channel": channel.value,
                "requested": amount,
                "available": before,
            },
        )

    after = before - amount
    gateway.update_product(product.id, {channel.stock_column: after}, product=product)

    entry = append_log_entry(
        purchase_action(channel),
        f"Produk #{product.id} ({product.product_code}) terjual {amount}: "
        f"stok {channel.value} {before} -> {after}",
    )
    return StockMovement(
        product_id=product.id,
        product_code=product.product_code,
        channel=channel,
        amount=amount,
        before=before,
        after=after,
        log_entry_id=entry.id,
    )


def decrement_channel_stock(product_id: int, channel, amount) -> StockMovement:
    """
    Reduce a channel allocation after a sale.

    The channel stock is read fresh under lock and re-checked, so a stale
    cart snapshot can never drive a pool negative.
    """
    channel = parse_channel(channel)
    qty = _parse_amount(amount)

    def _op():
        movement = _decrement_channel_stock_inner(product_id, channel, qty)
        db.session.commit()
        return movement

    return run_with_retry(_op)
