# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.utils.settings import MAX_ITEM_QUANTITY


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


RequiredText = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


# =====================================================
# PRODUCTS
# =====================================================
class ProductIn(CamelModel):
    """Create and full-replace payload for a product."""

    name: RequiredText
    description: RequiredText
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Price must be positive")
    sku: RequiredText


class ImageSummary(CamelModel):
    id: str
    url: str
    position: int


class ProductOut(CamelModel):
    id: str
    name: str
    description: str
    price: float
    sku: str
    created_at: datetime
    images: List[ImageSummary] = []


class ImageUrlIn(CamelModel):
    url: AnyUrl
    position: int = Field(0, ge=0)


class ProductImageOut(CamelModel):
    id: str
    product_id: str
    url: str
    position: int
    created_at: datetime


# =====================================================
# CART
# =====================================================
class CreateCartIn(CamelModel):
    session_id: RequiredText


class ItemIn(CamelModel):
    product_id: RequiredText
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class ItemQuantityIn(CamelModel):
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class CartProductOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    price: float
    sku: str
    image_url: str | None = None


class CartItemOut(CamelModel):
    id: str
    cart_id: str
    product_id: str
    quantity: int
    created_at: datetime
    updated_at: datetime


class CartLineOut(CartItemOut):
    product: CartProductOut


class CartOut(CamelModel):
    id: str
    session_id: str
    created_at: datetime
    updated_at: datetime
    items: List[CartLineOut]
    total_items: int
    total_price: float


class SuccessOut(BaseModel):
    success: bool = True


class HealthOut(BaseModel):
    status: str
    timestamp: str
