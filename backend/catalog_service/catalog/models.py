# backend/catalog_service/catalog/models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Text

from .db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(2048), nullable=True)  # externally hosted URL
    # set in Python so ordering keeps sub-second resolution on every backend
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (CheckConstraint("price >= 0", name="ck_products_price_nonneg"),)

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price}, image='{self.image[:30] if self.image else 'None'}...')>"


def products_newest_first(db):
    """Every product, most recently created first."""
    return db.query(Product).order_by(Product.created_at.desc()).all()
