# storefront/api/__init__.py
from storefront.api.errors import register_error_handlers

__all__ = ["register_error_handlers"]
