# storefront/data/seed.py
from datetime import datetime, timezone
from decimal import Decimal
import uuid

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    ("Mechanical Keyboard", "Tenkeyless keyboard with brown switches", Decimal("199.99"), "KB-001"),
    ("Wireless Mouse", "Ergonomic mouse with USB receiver", Decimal("49.50"), "MS-001"),
    ("27in Monitor", "QHD IPS panel, 144 Hz", Decimal("899.00"), "MN-027"),
]


def seed() -> int:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            logger.info("Products table not empty, skipping seed")
            return 0
        for name, description, price, sku in DEMO_PRODUCTS:
            db.add(ProductModel(
                id=str(uuid.uuid4()),
                name=name,
                description=description,
                price=price,
                sku=sku,
                created_at=datetime.now(timezone.utc),
            ))
        db.commit()
        logger.info(f"Seeded {len(DEMO_PRODUCTS)} products")
        return len(DEMO_PRODUCTS)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
