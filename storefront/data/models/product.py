# storefront/data/models/product.py
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Text, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.data.types import UTCDateTime


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    sku = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=_now)

    images = relationship(
        "ProductImageModel",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
