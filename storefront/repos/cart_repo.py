# storefront/repos/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_image import ProductImageModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: str) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_by_session(self, session_id: str) -> CartModel | None:
        #latest cart wins if the table predates the unique constraint
        return self.db.execute(
            select(CartModel)
            .where(CartModel.session_id == session_id)
            .order_by(CartModel.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def product_exists(self, product_id: str) -> bool:
        return self.db.get(ProductModel, product_id) is not None

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def touch_cart(self, cart_id: str) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(updated_at=datetime.now(timezone.utc))
        )

    def get_cart_items(self, cart_id: str) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.created_at.asc())
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_item(self, item_id: str) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def get_cart_item(self, cart_id: str, product_id: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def increment_quantity(self, item_id: str, amount: int) -> int:
        #single UPDATE, the read happens inside the database
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == item_id)
            .values(
                quantity=CartItemModel.quantity + amount,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def set_quantity(self, item_id: str, quantity: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == item_id)
            .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_item(self, item_id: str) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.id == item_id))
        return result.rowcount

    def clear_items(self, cart_id: str) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        return result.rowcount

    def first_image_urls(self, product_ids: list[str]) -> dict[str, str]:
        if not product_ids:
            return {}
        rows = self.db.execute(
            select(ProductImageModel.product_id, ProductImageModel.url)
            .where(ProductImageModel.product_id.in_(product_ids))
            .order_by(ProductImageModel.position.asc(), ProductImageModel.created_at.asc())
        ).all()

        urls: dict[str, str] = {}
        for product_id, url in rows:
            urls.setdefault(product_id, url)
        return urls

    def refresh(self, obj):
        self.db.refresh(obj)
        return obj

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
