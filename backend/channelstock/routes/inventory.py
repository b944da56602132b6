# Overview: Flask API routes for ledger stock operations; manager-only.

# backend/channelstock/routes/inventory.py
"""
Inventory ledger routes.

SECURITY: Every route here requires the manager role.
- add-stock increases the warehouse pool
- reduce-stock takes a purchase straight out of the warehouse pool
- distribute moves warehouse stock into channel allocations
"""
from flask import Blueprint, request, jsonify, current_app

from ..channels import Role
from ..services import inventory_service
from ..services.inventory_service import CapacityExceededError
from ..services.products_service import product_payload
from ..validation import ValidationError, NotFoundError
from ..decorators import require_role


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/<int:product_id>/add-stock")
@require_role(Role.MANAGER)
def add_stock_route(product_id: int):
    """
    Body: {"amount": <positive int>}
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = inventory_service.add_stock(product_id, payload.get("amount"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except Exception:
        current_app.logger.exception("Failed to add stock")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": product_payload(product)}), 200


@inventory_bp.post("/<int:product_id>/reduce-stock")
@require_role(Role.MANAGER)
def reduce_stock_route(product_id: int):
    """
    Body: {"amount": <positive int>}

    Records a purchase taken straight from the warehouse pool. An amount
    larger than total_stock is rejected with 409 and nothing changes.
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = inventory_service.reduce_stock(product_id, payload.get("amount"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except CapacityExceededError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to reduce stock")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": product_payload(product)}), 200


@inventory_bp.post("/<int:product_id>/distribute")
@require_role(Role.MANAGER)
def distribute_stock_route(product_id: int):
    """
    Body: {"allocations": {"tiktok": 30, "shopee": 0, "toko": 5}}

    Rejected without any change when the allocations add up to 0 (400) or
    to more than the current warehouse stock (409).
    """
    payload = request.get_json(silent=True) or {}
    allocations = payload.get("allocations")
    if allocations is None:
        return jsonify({"error": "allocations required"}), 400

    try:
        product = inventory_service.distribute_stock(product_id, allocations)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except CapacityExceededError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to distribute stock")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": product_payload(product)}), 200
