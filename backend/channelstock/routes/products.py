# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/channelstock/routes/products.py
"""
Product catalog routes.

- Read operations are open to every role.
- Creating products is manager-only.
"""
from flask import Blueprint, request, current_app

from ..channels import Role
from ..colors import color_options
from ..models import Product
from ..services import inventory_service
from ..services.products_service import list_products as list_products_service, product_payload
from ..validation import (
    PayloadPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_role

PRODUCT_POLICY = PayloadPolicy(
    writable_fields=frozenset({"product_code", "price", "total_stock", "color"}),
    required_on_create=frozenset({"price", "total_stock", "color"}),
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_role()
def list_products():
    """
    List products newest-first with filters and pagination.

    Query params:
    - search: substring of the product code
    - color: palette key or "all"
    - stock: all | available | low | out
    - channel: apply the stock filter to this channel's stock
    - page / per_page: pagination (per_page max 100)
    """
    try:
        return list_products_service(
            search=request.args.get("search"),
            color=request.args.get("color"),
            stock_filter=request.args.get("stock", "all"),
            channel=request.args.get("channel"),
            page=request.args.get("page", type=int),
            per_page=request.args.get("per_page", type=int),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400


@products_bp.get("/colors")
@require_role()
def list_colors():
    return {"colors": color_options()}


@products_bp.get("/<int:product_id>")
@require_role()
def get_product(product_id: int):
    try:
        product = inventory_service.get_product(product_id)
    except NotFoundError:
        return {"error": "Product not found"}, 404
    return {"product": product_payload(product)}


@products_bp.post("")
@require_role(Role.MANAGER)
def create_product():
    """
    Create a product. Channel stocks start at 0.

    product_code is optional; when omitted it is generated from the next
    sequence number and the colour's palette index (code_prefix query arg
    adds a series prefix).
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=Product,
            payload=payload,
            policy=PRODUCT_POLICY,
            partial=False,
        )
        enforce_rules_product(patch)
        product = inventory_service.create_product(
            price=patch["price"],
            total_stock=patch["total_stock"],
            color=patch["color"],
            product_code=patch.get("product_code"),
            code_prefix=request.args.get("code_prefix", ""),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return {"product": product_payload(product)}, 201
