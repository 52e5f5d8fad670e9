# storefront/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.product_image import ProductImageModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_product_by_sku(self, sku: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.sku == sku)
        ).scalar_one_or_none()

    def list_products(self) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel).order_by(ProductModel.created_at.desc())
            ).scalars()
        )

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    # images
    def get_image(self, image_id: str) -> ProductImageModel | None:
        return self.db.get(ProductImageModel, image_id)

    def get_images(self, product_id: str) -> list[ProductImageModel]:
        return list(
            self.db.execute(
                select(ProductImageModel)
                .where(ProductImageModel.product_id == product_id)
                .order_by(ProductImageModel.position.asc(), ProductImageModel.created_at.asc())
            ).scalars()
        )

    def get_images_for_products(self, product_ids: list[str]) -> dict[str, list[ProductImageModel]]:
        grouped: dict[str, list[ProductImageModel]] = {pid: [] for pid in product_ids}
        if not product_ids:
            return grouped

        rows = self.db.execute(
            select(ProductImageModel)
            .where(ProductImageModel.product_id.in_(product_ids))
            .order_by(ProductImageModel.position.asc(), ProductImageModel.created_at.asc())
        ).scalars()
        for image in rows:
            grouped[image.product_id].append(image)
        return grouped

    def add_image(self, image: ProductImageModel) -> ProductImageModel:
        self.db.add(image)
        self.db.flush()
        return image

    def delete_image(self, image: ProductImageModel) -> None:
        self.db.delete(image)
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
