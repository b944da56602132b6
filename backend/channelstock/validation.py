# Overview: Input coercion, payload allowlists and the error types the API maps to status codes.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Integer, String, Text


# Rp 999.999.999.999
MAX_PRICE = 999_999_999_999

# Upper bound for a single stock quantity field
MAX_STOCK = 10_000_000


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (duplicate product code, not enough stock)."""


class NotFoundError(LookupError):
    """404-level missing record."""


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Which JSON keys a client may send for a model.

    writable_fields is the allowlist; required_on_create must be present
    when the payload creates a row.
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


def coerce_int(key: str, value: Any) -> int:
    """
    Strict integer coercion for user input.

    Accepts ints (not bools) and plain digit strings with an optional sign.
    Rejects floats, decimals and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be an integer")

    text = value.strip()
    if "e" in text.lower():
        raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
    if "." in text or "," in text:
        raise ValidationError(f"{key} must be an integer (no decimals)")
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{key} must be an integer")


def _clean_value(column, value: Any):
    if isinstance(column.type, Integer):
        return coerce_int(column.key, value)

    if isinstance(column.type, (String, Text)):
        text = str(value).strip()
        if not text and not column.nullable:
            raise ValidationError(f"{column.key} cannot be blank")
        limit = getattr(column.type, "length", None)
        if limit and len(text) > limit:
            raise ValidationError(f"{column.key} exceeds max length {limit}")
        return text

    return value


def validate_payload(*, model, payload, policy: PayloadPolicy, partial: bool) -> dict:
    """
    Check a JSON body against the policy allowlist and the model's columns.

    Values are coerced by column type (strict ints, stripped strings with
    length checks). Returns only the keys the client sent.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    rejected = sorted(k for k in payload if k not in policy.writable_fields)
    if rejected:
        raise ValidationError(f"Field not allowed: {', '.join(rejected)}")

    if not partial:
        missing = sorted(policy.required_on_create - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}
    for key, raw in payload.items():
        column = columns.get(key)
        if column is None:
            raise ValidationError(f"Unknown field: {key}")
        if raw is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
            continue
        patch[key] = _clean_value(column, raw)
    return patch


def enforce_rules_product(patch: dict) -> None:
    """Range checks for price and warehouse stock."""
    price = patch.get("price")
    if price is not None:
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}")

    stock = patch.get("total_stock")
    if stock is not None:
        if stock < 0:
            raise ValidationError("total_stock must be >= 0")
        if stock > MAX_STOCK:
            raise ValidationError(f"total_stock cannot exceed {MAX_STOCK}")
