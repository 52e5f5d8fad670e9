# storefront/domain/errors.py
"""Exceptions raised by the service layer and translated by the routers."""


class NotFoundError(LookupError):
    """Referenced product, image, cart or cart item does not exist."""


class DuplicateSkuError(ValueError):
    def __init__(self, sku: str):
        super().__init__("SKU already exists")
        self.sku = sku


class InvalidImageError(ValueError):
    """Image-by-URL payload failed validation."""

    def __init__(self, details: list[dict]):
        super().__init__("Validation failed")
        self.details = details


class NoFilesError(ValueError):
    def __init__(self):
        super().__init__('No files provided. Use field name "images".')


class UnsupportedMediaTypeError(ValueError):
    def __init__(self, content_type: str):
        super().__init__("Unsupported Content-Type")
        self.content_type = content_type
