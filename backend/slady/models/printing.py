from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

JOB_RECEIPT = "RECEIPT"
JOB_REPRINT = "REPRINT"
JOB_LABEL = "LABEL"
JOB_DAILY_REPORT = "DAILY_REPORT"
JOB_DRAWER_KICK = "DRAWER_KICK"


class PrintJob(db.Model):
    """
    Rendered document waiting for the store's printer agent.

    The backend only queues; the agent on the shop PC polls QUEUED jobs,
    prints them and flips the status.
    """
    __tablename__ = "print_jobs"
    __table_args__ = (
        db.Index("ix_print_jobs_store_status", "store", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False)
    kind = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="QUEUED")

    # Plain integer: deleting a receipt must not delete its print history
    receipt_id = db.Column(db.Integer, nullable=True, index=True)
    content = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store,
            "kind": self.kind,
            "status": self.status,
            "receipt_id": self.receipt_id,
            "content": self.content,
            "created_at": to_utc_z(self.created_at),
        }
