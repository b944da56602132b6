# Overview: Session-scoped carts and checkout against the inventory ledger.

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from flask import current_app

from ..channels import Channel, parse_channel
from ..extensions import db
from ..models import Product
from ..time_utils import to_utc_z, utcnow
from ..validation import ConflictError, NotFoundError, ValidationError, coerce_int
from .concurrency import run_with_retry
from .inventory_service import (
    CapacityExceededError,
    StockMovement,
    _decrement_channel_stock_inner,
)
"""
Cart & Checkout Invariants (authoritative)

Cart:
- A cart belongs to one session and one channel; it is never persisted.
- add_to_cart validates quantity > 0 and quantity <= the live channel stock of
  the product passed in. Nothing is written to the ledger or the log.
- unit_price and stock_snapshot are frozen at add time.
- A second line for the same product needs an explicit confirmation.
- add_to_cart and checkout hold the cart's own lock, so a cart is never
  checked out twice or changed while a checkout runs.
- Carts older than the registry's max_age are evicted; a checked-out cart
  is discarded by the caller.

Checkout:
- Lines are decremented in cart order inside ONE database transaction.
- Every line is attempted so the failure report covers all bad lines.
- Any failed line rolls the whole transaction back: either every line is
  applied (one log entry each) or none is.
- Total = sum(unit_price * quantity) over the frozen line prices.
"""


class InvalidQuantityError(ValidationError):
    """Quantity input is missing, non-numeric or not positive."""


class EmptyCartError(ValidationError):
    """Checkout requested for a cart with no lines."""


class ExceedsAvailableStockError(ConflictError):
    """Requested quantity is larger than the live channel stock."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class DuplicateLineError(ConflictError):
    """Product already in cart; caller must confirm adding another line."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class CheckoutError(Exception):
    """Raised when one or more cart lines could not be checked out."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class CartLine:
    product_id: int
    product_code: str
    channel: Channel
    quantity: int
    unit_price: int
    stock_snapshot: int
    color: str

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_code": self.product_code,
            "channel": self.channel.value,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "stock_snapshot": self.stock_snapshot,
            "color": self.color,
            "line_total": self.line_total,
        }


@dataclass
class Cart:
    channel: Channel
    id: str = field(default_factory=lambda: secrets.token_urlsafe(12))
    lines: list[CartLine] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def total(self) -> int:
        return sum(line.line_total for line in self.lines)

    def has_product(self, product_id: int) -> bool:
        return any(line.product_id == product_id for line in self.lines)

    def clear(self) -> None:
        self.lines.clear()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "channel": self.channel.value,
            "lines": [line.to_dict() for line in self.lines],
            "total": self.total,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass(frozen=True)
class CheckoutResult:
    channel: Channel
    total: int
    movements: list[StockMovement]

    def to_dict(self) -> dict:
        return {
            "channel": self.channel.value,
            "total": self.total,
            "movements": [m.to_dict() for m in self.movements],
        }


def parse_quantity(raw) -> int:
    """Parse a user-entered quantity; must be a positive integer."""
    if raw is None:
        raise InvalidQuantityError("quantity is required")
    try:
        qty = coerce_int("quantity", raw)
    except ValidationError as e:
        raise InvalidQuantityError(str(e))
    if qty <= 0:
        raise InvalidQuantityError("quantity must be greater than 0")
    return qty


def add_to_cart(cart: Cart, product: Product, quantity, *, confirm_duplicate: bool = False) -> CartLine:
    """
    Append a line for ``product`` on the cart's channel.

    Raises InvalidQuantityError, ExceedsAvailableStockError or
    DuplicateLineError; the cart is unchanged in every error case.
    """
    qty = parse_quantity(quantity)

    with cart.lock:
        available = product.channel_stock(cart.channel)
        if qty > available:
            raise ExceedsAvailableStockError(
                "quantity exceeds available stock",
                details={
                    "product_id": product.id,
                    "channel": cart.channel.value,
                    "requested": qty,
                    "available": available,
                },
            )

        if cart.has_product(product.id) and not confirm_duplicate:
            raise DuplicateLineError(
                "product is already in the cart",
                details={"product_id": product.id},
            )

        line = CartLine(
            product_id=product.id,
            product_code=product.product_code,
            channel=cart.channel,
            quantity=qty,
            unit_price=product.price,
            stock_snapshot=available,
            color=product.color,
        )
        cart.lines.append(line)
        return line


def _checkout_lines(cart: Cart, lines: list[CartLine]) -> list[StockMovement]:
    movements: list[StockMovement] = []
    failures: list[dict] = []

    for index, line in enumerate(lines):
        try:
            movements.append(
                _decrement_channel_stock_inner(line.product_id, cart.channel, line.quantity)
            )
        except CapacityExceededError as e:
            failures.append({
                "line": index,
                "product_id": line.product_id,
                "requested": line.quantity,
                "available": e.details.get("available"),
                "reason": str(e),
            })
        except NotFoundError as e:
            failures.append({
                "line": index,
                "product_id": line.product_id,
                "requested": line.quantity,
                "available": None,
                "reason": str(e),
            })

    if failures:
        db.session.rollback()
        raise CheckoutError(
            "checkout failed; no stock was changed",
            details={"channel": cart.channel.value, "failed_lines": failures},
        )

    db.session.commit()
    return movements


def checkout(cart: Cart) -> CheckoutResult:
    """
    Decrement every line's channel stock, all-or-nothing.

    On failure raises CheckoutError whose details list every failed line
    (index, product_id, requested, available, reason) and leaves both the
    ledger and the cart untouched. On success the cart is cleared.

    The cart's lock is held for the whole checkout; a second checkout of the
    same cart waits and then finds it empty.
    """
    with cart.lock:
        if not cart.lines:
            raise EmptyCartError("cart is empty")

        lines = list(cart.lines)
        try:
            movements = run_with_retry(lambda: _checkout_lines(cart, lines))
        except CheckoutError as e:
            current_app.logger.warning(
                "Checkout of cart %s failed for %d line(s)", cart.id, len(e.details["failed_lines"])
            )
            raise

        result = CheckoutResult(
            channel=cart.channel,
            total=sum(line.line_total for line in lines),
            movements=movements,
        )
        cart.clear()

    current_app.logger.info("Checked out cart %s on %s, total %s", cart.id, cart.channel.value, result.total)
    return result


class CartRegistry:
    """
    In-process carts keyed by cart id, one per browser session.

    Carts older than ``max_age`` are dropped whenever a cart is opened or
    looked up.
    """

    def __init__(self, max_age: timedelta | None = None) -> None:
        self._carts: dict[str, Cart] = {}
        self._lock = threading.Lock()
        self.max_age = max_age

    def _evict_expired(self, now: datetime) -> int:
        if self.max_age is None:
            return 0
        expired = [cid for cid, cart in self._carts.items() if now - cart.created_at > self.max_age]
        for cid in expired:
            del self._carts[cid]
        return len(expired)

    def evict_expired(self, now: datetime | None = None) -> int:
        """Drop expired carts; returns how many were removed."""
        with self._lock:
            return self._evict_expired(now or utcnow())

    def create(self, channel) -> Cart:
        cart = Cart(channel=parse_channel(channel))
        with self._lock:
            self._evict_expired(cart.created_at)
            self._carts[cart.id] = cart
        return cart

    def get(self, cart_id: str) -> Cart:
        with self._lock:
            self._evict_expired(utcnow())
            cart = self._carts.get(cart_id)
        if cart is None:
            raise NotFoundError(f"cart {cart_id} not found")
        return cart

    def discard(self, cart_id: str, *, missing_ok: bool = False) -> None:
        with self._lock:
            if self._carts.pop(cart_id, None) is None and not missing_ok:
                raise NotFoundError(f"cart {cart_id} not found")

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)


def init_cart_registry(app) -> CartRegistry:
    """Install a fresh registry on ``app``; carts expire after CART_TTL_MINUTES."""
    ttl = app.config.get("CART_TTL_MINUTES")
    registry = CartRegistry(max_age=timedelta(minutes=ttl) if ttl else None)
    app.extensions["channelstock.carts"] = registry
    return registry


def get_cart_registry() -> CartRegistry:
    return current_app.extensions["channelstock.carts"]
