# storefront/data/models/cart.py
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.data.types import UTCDateTime


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    #opaque token generated by the client, one cart per session
    session_id = Column(String, nullable=False, unique=True, index=True)

    created_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CartItemModel.created_at",
    )
