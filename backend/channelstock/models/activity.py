from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ActivityLog(db.Model):
    """
    Append-only activity log.

    One row per mutating ledger operation, written in the same DB transaction
    as the mutation it records. Rows are never updated or deleted.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} action={self.action!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "description": self.description,
            "timestamp": to_utc_z(self.created_at),
        }
