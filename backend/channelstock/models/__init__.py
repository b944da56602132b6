from .inventory import Product
from .activity import ActivityLog

__all__ = [
    'Product',
    'ActivityLog',
]
