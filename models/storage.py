from sqlalchemy.sql import func
from models import db


class StoredValue(db.Model):
    """One persisted storefront blob (cart, orders, reminders, session)."""

    __tablename__ = "stored_value"

    key = db.Column(db.String(32), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<StoredValue {self.key}>"
