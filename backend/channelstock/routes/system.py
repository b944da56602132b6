# backend/channelstock/routes/system.py
"""
Liveness endpoint for deployments.

A broken DATABASE_URL shows up as 503 here instead of as 500s on the API.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, ActivityLog
from ..services.cart_service import get_cart_registry
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def database_status() -> dict:
    """Row counts for both tables plus the round-trip time."""
    started = time.perf_counter()
    try:
        counts = {
            "products": db.session.query(Product).count(),
            "activity_logs": db.session.query(ActivityLog).count(),
        }
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "error": "Database error",
        }

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "details": counts,
    }


@system_bp.get("/health")
def health():
    database = database_status()
    return {
        "status": database["status"],
        "timestamp": to_utc_z(utcnow()),
        "database": database,
        "open_carts": len(get_cart_registry()),
    }, 200 if database["status"] == "healthy" else 503
