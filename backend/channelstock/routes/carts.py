# Overview: Flask API routes for channel carts and checkout.

# backend/channelstock/routes/carts.py
"""Cart API routes with channel access enforcement"""

from flask import Blueprint, request, jsonify, current_app

from ..services import inventory_service
from ..services.cart_service import (
    CheckoutError,
    DuplicateLineError,
    ExceedsAvailableStockError,
    add_to_cart,
    checkout,
    get_cart_registry,
)
from ..validation import ValidationError, NotFoundError
from ..decorators import require_role, require_channel_access


carts_bp = Blueprint("carts", __name__, url_prefix="/api/carts")


def _load_cart(channel, cart_id: str):
    cart = get_cart_registry().get(cart_id)
    if cart.channel is not channel:
        raise NotFoundError(f"cart {cart_id} not found")
    return cart


@carts_bp.post("/<channel>")
@require_role()
@require_channel_access
def create_cart_route(channel):
    """
    Open a new empty cart on a channel.

    Available to: the channel's own role and manager
    """
    cart = get_cart_registry().create(channel)
    return jsonify({"cart": cart.to_dict()}), 201


@carts_bp.get("/<channel>/<cart_id>")
@require_role()
@require_channel_access
def get_cart_route(channel, cart_id: str):
    try:
        cart = _load_cart(channel, cart_id)
    except NotFoundError:
        return jsonify({"error": "Cart not found"}), 404
    return jsonify({"cart": cart.to_dict()}), 200


@carts_bp.post("/<channel>/<cart_id>/lines")
@require_role()
@require_channel_access
def add_line_route(channel, cart_id: str):
    """
    Add a product line to the cart.

    Body: {"product_id": 1, "quantity": "3", "confirm_duplicate": false}

    A product already in the cart is rejected with 409 unless
    confirm_duplicate is true, in which case a second line is appended.
    """
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    if product_id is None:
        return jsonify({"error": "product_id required"}), 400
    try:
        product_id = int(product_id)
    except (TypeError, ValueError):
        return jsonify({"error": "product_id must be an integer"}), 400

    try:
        cart = _load_cart(channel, cart_id)
        product = inventory_service.get_product(product_id)
        line = add_to_cart(
            cart,
            product,
            data.get("quantity"),
            confirm_duplicate=bool(data.get("confirm_duplicate", False)),
        )
    except (ExceedsAvailableStockError, DuplicateLineError) as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to add cart line")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"line": line.to_dict(), "cart": cart.to_dict()}), 201


@carts_bp.post("/<channel>/<cart_id>/checkout")
@require_role()
@require_channel_access
def checkout_route(channel, cart_id: str):
    """
    Check the cart out: decrement every line's channel stock.

    All-or-nothing. On failure (409) the response lists every failed line
    and nothing was changed; the cart keeps its lines. On success the cart
    is closed and later requests for it return 404.
    """
    try:
        cart = _load_cart(channel, cart_id)
        result = checkout(cart)
    except NotFoundError:
        return jsonify({"error": "Cart not found"}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to check out cart")
        return jsonify({"error": "Internal server error"}), 500

    # a checked-out cart is finished; the next sale opens a new one
    get_cart_registry().discard(cart.id, missing_ok=True)
    return jsonify({"checkout": result.to_dict(), "cart": cart.to_dict()}), 200


@carts_bp.delete("/<channel>/<cart_id>")
@require_role()
@require_channel_access
def discard_cart_route(channel, cart_id: str):
    try:
        _load_cart(channel, cart_id)
        get_cart_registry().discard(cart_id)
    except NotFoundError:
        return jsonify({"error": "Cart not found"}), 404
    return "", 204
