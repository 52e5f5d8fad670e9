# storefront/services/cart_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry

logger = get_logger(__name__)


def _item_dict(item: CartItemModel) -> Dict[str, Any]:
    return {
        "id": item.id,
        "cart_id": item.cart_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


class CartService:
    """
    Simple CQRS split for the cart domain
    commands (get-or-create, add, update, remove, clear) modify state
    query (get_cart_with_items) only reads
    totals are derived from current product prices on every read
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    #query - read
    def get_cart_with_items(self, session_id: str) -> Dict[str, Any] | None:
        cart = self.repo.get_cart_by_session(session_id)
        if not cart:
            return None
        return self._cart_dict(cart)

    #commands
    @db_retry()
    def get_or_create_cart(self, session_id: str) -> Dict[str, Any]:
        existing = self.get_cart_with_items(session_id)
        if existing:
            return existing

        now = datetime.now(timezone.utc)
        cart = CartModel(id=str(uuid.uuid4()), session_id=session_id, created_at=now, updated_at=now)
        try:
            self.repo.create_cart(cart)
            self.repo.commit()
        except IntegrityError:
            #a parallel request created the cart for this session first
            self.repo.rollback()
            logger.info(f"Cart for session {session_id} created concurrently, reusing it")
            return self.get_cart_with_items(session_id)
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Created cart {cart.id} for session {session_id}")
        return self._cart_dict(cart)

    def cart_exists(self, cart_id: str) -> bool:
        return self.repo.get_cart(cart_id) is not None

    def product_exists(self, product_id: str) -> bool:
        return self.repo.product_exists(product_id)

    @db_retry()
    def add_item(self, cart_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        try:
            item = self.repo.get_cart_item(cart_id, product_id)
            if item:
                self._increment(item, quantity)
            else:
                item = CartItemModel(
                    id=str(uuid.uuid4()),
                    cart_id=cart_id,
                    product_id=product_id,
                    quantity=quantity,
                )
                try:
                    self.repo.add_cart_item(item)
                    logger.info(f"Added product {product_id} to cart {cart_id} (qty={quantity})")
                except IntegrityError:
                    #lost the insert race on u_cart_product, fall back to increment
                    self.repo.rollback()
                    item = self.repo.get_cart_item(cart_id, product_id)
                    if not item:
                        raise
                    self._increment(item, quantity)

            self.repo.touch_cart(cart_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return _item_dict(self.repo.refresh(item))

    @db_retry()
    def update_item(self, item_id: str, quantity: int) -> Dict[str, Any]:
        item = self.repo.get_item(item_id)
        if not item:
            raise NotFoundError("Item not found")

        try:
            self.repo.set_quantity(item_id, quantity)
            self.repo.touch_cart(item.cart_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Set quantity of cart item {item_id} to {quantity}")
        return _item_dict(self.repo.refresh(item))

    @db_retry()
    def remove_item(self, item_id: str) -> Dict[str, bool]:
        item = self.repo.get_item(item_id)
        try:
            if item:
                self.repo.delete_item(item_id)
                self.repo.touch_cart(item.cart_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Removed cart item {item_id}" if item else f"Cart item {item_id} already absent")
        return {"success": True}

    @db_retry()
    def clear_cart(self, cart_id: str) -> Dict[str, bool]:
        try:
            removed = self.repo.clear_items(cart_id)
            self.repo.touch_cart(cart_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cleared cart {cart_id} ({removed} item(s))")
        return {"success": True}

    def _increment(self, item: CartItemModel, quantity: int) -> None:
        logger.info(
            f"Product {item.product_id} already in cart {item.cart_id}, "
            f"incrementing quantity by {quantity}"
        )
        self.repo.increment_quantity(item.id, quantity)

    def _cart_dict(self, cart: CartModel) -> Dict[str, Any]:
        items = self.repo.get_cart_items(cart.id)
        image_urls = self.repo.first_image_urls(list({i.product_id for i in items}))

        lines = []
        for i in items:
            p = i.product
            lines.append({
                **_item_dict(i),
                "product": {
                    "id": p.id,
                    "name": p.name,
                    "description": p.description,
                    "price": p.price,
                    "sku": p.sku,
                    "image_url": image_urls.get(p.id),
                },
            })

        total_items = sum(i.quantity for i in items)
        total_price = sum((i.product.price * i.quantity for i in items), Decimal("0.00"))

        return {
            "id": cart.id,
            "session_id": cart.session_id,
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
            "items": lines,
            "total_items": total_items,
            "total_price": total_price,
        }
