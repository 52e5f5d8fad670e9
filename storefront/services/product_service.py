# storefront/services/product_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Tuple
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.product_image import ProductImageModel
from storefront.domain.errors import DuplicateSkuError, NoFilesError, NotFoundError
from storefront.repos.product_repo import ProductRepo
from storefront.services.file_storage import FileStorage
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry

logger = get_logger(__name__)


def _image_summary(image: ProductImageModel) -> Dict[str, Any]:
    return {"id": image.id, "url": image.url, "position": image.position}


def _image_dict(image: ProductImageModel) -> Dict[str, Any]:
    return {
        "id": image.id,
        "product_id": image.product_id,
        "url": image.url,
        "position": image.position,
        "created_at": image.created_at,
    }


def _product_dict(product: ProductModel, images: Iterable[ProductImageModel] = ()) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "sku": product.sku,
        "created_at": product.created_at,
        "images": [_image_summary(i) for i in images],
    }


class ProductService:
    """
    Catalogue use cases: product CRUD plus the product's image gallery.
    Images are either remote URLs or files kept by FileStorage.
    """

    def __init__(self, db: Session, storage: FileStorage):
        self.repo = ProductRepo(db)
        self.storage = storage

    # =====================================================
    # QUERY
    # =====================================================
    def list_products(self) -> List[Dict[str, Any]]:
        products = self.repo.list_products()
        images = self.repo.get_images_for_products([p.id for p in products])
        return [_product_dict(p, images[p.id]) for p in products]

    def get_product(self, product_id: str) -> Dict[str, Any]:
        product = self._require_product(product_id)
        return _product_dict(product, self.repo.get_images(product_id))

    def list_images(self, product_id: str) -> List[Dict[str, Any]]:
        self._require_product(product_id)
        return [_image_dict(i) for i in self.repo.get_images(product_id)]

    # =====================================================
    # COMMANDS
    # =====================================================
    @db_retry()
    def create_product(self, name: str, description: str, price: Decimal, sku: str) -> Dict[str, Any]:
        if self.repo.get_product_by_sku(sku):
            raise DuplicateSkuError(sku)

        product = ProductModel(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            price=price,
            sku=sku,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.repo.add_product(product)
            self.repo.commit()
        except IntegrityError:
            #another request took the sku between the check and the insert
            self.repo.rollback()
            raise DuplicateSkuError(sku)
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Created product {product.id} (sku={sku})")
        return _product_dict(product)

    @db_retry()
    def update_product(
        self,
        product_id: str,
        name: str,
        description: str,
        price: Decimal,
        sku: str,
    ) -> Dict[str, Any]:
        product = self._require_product(product_id)

        if sku != product.sku and self.repo.get_product_by_sku(sku):
            raise DuplicateSkuError(sku)

        product.name = name
        product.description = description
        product.price = price
        product.sku = sku
        try:
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateSkuError(sku)
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Updated product {product_id}")
        return _product_dict(product, self.repo.get_images(product_id))

    @db_retry()
    def delete_product(self, product_id: str) -> None:
        product = self._require_product(product_id)
        urls = [i.url for i in self.repo.get_images(product_id)]

        try:
            self.repo.delete_product(product)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Deleted product {product_id} with {len(urls)} image(s)")
        for url in urls:
            self.storage.remove(url)

    @db_retry()
    def add_image_url(self, product_id: str, url: str, position: int = 0) -> Dict[str, Any]:
        self._require_product(product_id)

        image = self._new_image(product_id, url, position)
        try:
            self.repo.add_image(image)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Added image {image.id} to product {product_id} from url")
        return _image_dict(image)

    def add_image_files(self, product_id: str, files: List[Tuple[str | None, bytes]]) -> List[Dict[str, Any]]:
        """
        Store every (filename, content) pair and create one image row per file.

        Stored files are removed again if the rows cannot be committed.
        """
        self._require_product(product_id)
        if not files:
            raise NoFilesError()

        urls = [self.storage.save(product_id, name, content) for name, content in files]
        try:
            images = self._insert_images(product_id, urls)
        except Exception:
            for url in urls:
                self.storage.remove(url)
            raise

        logger.info(f"Uploaded {len(images)} image(s) for product {product_id}")
        return [_image_dict(i) for i in images]

    @db_retry()
    def delete_image(self, product_id: str, image_id: str) -> None:
        self._require_product(product_id)

        image = self.repo.get_image(image_id)
        if not image or image.product_id != product_id:
            raise NotFoundError("Image not found")

        url = image.url
        try:
            self.repo.delete_image(image)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Deleted image {image_id} of product {product_id}")
        #the row is the source of truth, a leftover file is harmless
        self.storage.remove(url)

    def ensure_product(self, product_id: str) -> None:
        self._require_product(product_id)

    # =====================================================
    # HELPERS
    # =====================================================
    def _require_product(self, product_id: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    def _new_image(product_id: str, url: str, position: int) -> ProductImageModel:
        return ProductImageModel(
            id=str(uuid.uuid4()),
            product_id=product_id,
            url=url,
            position=position,
            created_at=datetime.now(timezone.utc),
        )

    @db_retry()
    def _insert_images(self, product_id: str, urls: List[str]) -> List[ProductImageModel]:
        images = [self._new_image(product_id, url, 0) for url in urls]
        try:
            for image in images:
                self.repo.add_image(image)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        return images
