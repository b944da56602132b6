from __future__ import annotations

from ..extensions import db
from ..channels import Channel
from ..colors import color_display_name, color_hex
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data with its stock pools.

    STOCK MODEL:
    - total_stock is the warehouse pool not yet allocated to any channel.
    - tiktok_stock / shopee_stock / toko_stock are the per-channel allocations
      available for sale on that channel.
    - The pools are adjusted independently; there is no invariant tying
      total_stock to the sum of past allocations.
    - Every pool is >= 0 at all times (check constraints below).

    product_code, price and color are fixed at creation.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_products_price_nonneg"),
        db.CheckConstraint("total_stock >= 0", name="ck_products_total_stock_nonneg"),
        db.CheckConstraint("tiktok_stock >= 0", name="ck_products_tiktok_stock_nonneg"),
        db.CheckConstraint("shopee_stock >= 0", name="ck_products_shopee_stock_nonneg"),
        db.CheckConstraint("toko_stock >= 0", name="ck_products_toko_stock_nonneg"),
        db.Index("ix_products_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_code = db.Column(db.String(64), nullable=False, unique=True)

    # Whole rupiah; IDR has no minor unit in practice
    price = db.Column(db.Integer, nullable=False)

    total_stock = db.Column(db.Integer, nullable=False, default=0)
    tiktok_stock = db.Column(db.Integer, nullable=False, default=0)
    shopee_stock = db.Column(db.Integer, nullable=False, default=0)
    toko_stock = db.Column(db.Integer, nullable=False, default=0)

    # Palette key; hex and display name are derived
    color = db.Column(db.String(32), nullable=False)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.product_code!r} total={self.total_stock}>"

    def channel_stock(self, channel: Channel) -> int:
        return getattr(self, channel.stock_column)

    def channel_stocks(self) -> dict[str, int]:
        return {c.value: self.channel_stock(c) for c in Channel}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_code": self.product_code,
            "price": self.price,
            "total_stock": self.total_stock,
            "channel_stock": self.channel_stocks(),
            "color": self.color,
            "color_hex": color_hex(self.color),
            "color_name": color_display_name(self.color),
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
