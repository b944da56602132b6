# backend/channelstock/services/products_service.py
"""
Product listing: search, colour/stock filters, pagination and dashboard stats.

Filtering happens over the already-loaded product list; the catalog is small
enough that a single newest-first query per request is the whole cost.
"""
from __future__ import annotations

from flask import current_app

from ..channels import Channel, parse_channel
from ..colors import normalize_color
from ..models import Product
from ..validation import ValidationError
from . import gateway

STOCK_FILTERS = ("all", "available", "low", "out")
MAX_PER_PAGE = 100


def _low_threshold(low_threshold: int | None) -> int:
    if low_threshold is not None:
        return low_threshold
    return current_app.config.get("LOW_STOCK_THRESHOLD", 10)


def stock_status(stock: int, low_threshold: int | None = None) -> str:
    if stock == 0:
        return "Out of Stock"
    if stock < _low_threshold(low_threshold):
        return "Low Stock"
    return "In Stock"


def _stock_for(product: Product, channel: Channel | None) -> int:
    if channel is None:
        return product.total_stock
    return product.channel_stock(channel)


def filter_products(
    products: list[Product],
    *,
    search: str | None = None,
    color: str | None = None,
    stock_filter: str = "all",
    channel: Channel | None = None,
    low_threshold: int | None = None,
) -> list[Product]:
    """
    Apply search, colour and stock filters in that order.

    The stock filter looks at total_stock, or at the channel's stock when a
    channel is given (the cart views filter on their own channel).
    """
    filtered = products

    term = (search or "").strip().lower()
    if term:
        filtered = [p for p in filtered if term in p.product_code.lower()]

    if color and color.strip().lower() != "all":
        key = normalize_color(color)
        filtered = [p for p in filtered if p.color == key]

    stock_filter = (stock_filter or "all").strip().lower()
    if stock_filter not in STOCK_FILTERS:
        raise ValidationError(f"stock filter must be one of: {', '.join(STOCK_FILTERS)}")

    threshold = _low_threshold(low_threshold)
    if stock_filter == "low":
        filtered = [p for p in filtered if _stock_for(p, channel) < threshold]
    elif stock_filter == "out":
        filtered = [p for p in filtered if _stock_for(p, channel) == 0]
    elif stock_filter == "available":
        filtered = [p for p in filtered if _stock_for(p, channel) > 0]

    return filtered


def paginate(items: list, page: int | None, per_page: int | None) -> tuple[list, dict]:
    per_page = min(per_page or current_app.config.get("DEFAULT_PAGE_SIZE", 10), MAX_PER_PAGE)
    per_page = max(per_page, 1)
    page = max(page or 1, 1)

    total = len(items)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    start = (page - 1) * per_page

    return items[start:start + per_page], {
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def product_stats(products: list[Product], low_threshold: int | None = None) -> dict:
    threshold = _low_threshold(low_threshold)
    return {
        "total_products": len(products),
        "total_value": sum(p.price * p.total_stock for p in products),
        "low_stock_count": sum(1 for p in products if p.total_stock < threshold),
        "out_of_stock_count": sum(1 for p in products if p.total_stock == 0),
    }


def unique_colors(products: list[Product]) -> list[str]:
    seen: dict[str, None] = {}
    for p in products:
        seen.setdefault(p.color, None)
    return list(seen)


def product_payload(product: Product, channel: Channel | None = None) -> dict:
    data = product.to_dict()
    data["stock_status"] = stock_status(product.total_stock)
    if channel is not None:
        data["channel_stock_status"] = stock_status(product.channel_stock(channel))
    return data


def list_products(
    *,
    search: str | None = None,
    color: str | None = None,
    stock_filter: str = "all",
    channel: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Newest-first product listing with filters and pagination.

    Returns a dict with 'items', 'count', 'pagination', 'stats' (over the
    unfiltered catalog) and 'colors' (distinct colours in the catalog).
    """
    channel_enum = parse_channel(channel) if channel else None
    products = gateway.fetch_all_products()

    filtered = filter_products(
        products,
        search=search,
        color=color,
        stock_filter=stock_filter,
        channel=channel_enum,
    )
    page_items, pagination = paginate(filtered, page, per_page)

    return {
        "items": [product_payload(p, channel_enum) for p in page_items],
        "count": len(page_items),
        "pagination": pagination,
        "stats": product_stats(products),
        "colors": unique_colors(products),
    }
