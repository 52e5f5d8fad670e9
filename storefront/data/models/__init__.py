#import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.product import ProductModel
from storefront.data.models.product_image import ProductImageModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel

__all__ = ["ProductModel", "ProductImageModel", "CartModel", "CartItemModel"]
