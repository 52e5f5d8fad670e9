# storefront/services/file_storage.py
import os
import re
import secrets
import time

from storefront.utils.settings import UPLOADS_DIR
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PUBLIC_PREFIX = "/uploads/"
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def safe_filename(original: str | None) -> str:
    name = _UNSAFE_CHARS.sub("_", original or "")
    return name or "image"


def unique_filename(original: str | None) -> str:
    #millis + random token keeps concurrent uploads of the same file apart
    return f"{int(time.time() * 1000)}_{secrets.token_hex(6)}_{safe_filename(original)}"


class FileStorage:
    """
    -stores product files under <base>/products/<product_id>/
    -maps them to the public path /uploads/products/<product_id>/<name>
    -best-effort removal
    """

    def __init__(self, base_dir: str | None = None):
        self.base_dir = os.path.abspath(base_dir or UPLOADS_DIR)
        os.makedirs(self.base_dir, exist_ok=True)

    def product_dir(self, product_id: str) -> str:
        return os.path.join(self.base_dir, "products", product_id)

    def save(self, product_id: str, original_name: str | None, content: bytes) -> str:
        folder = self.product_dir(product_id)
        os.makedirs(folder, exist_ok=True)

        name = unique_filename(original_name)
        with open(os.path.join(folder, name), "wb") as fh:
            fh.write(content)

        logger.info(f"Stored upload {name} ({len(content)} bytes) for product {product_id}")
        return f"{PUBLIC_PREFIX}products/{product_id}/{name}"

    def local_path(self, public_url: str) -> str | None:
        if not public_url.startswith(PUBLIC_PREFIX):
            return None
        relative = public_url[len(PUBLIC_PREFIX):]
        path = os.path.abspath(os.path.join(self.base_dir, relative))
        #never leave the uploads directory
        if os.path.commonpath([path, self.base_dir]) != self.base_dir:
            return None
        return path

    def remove(self, public_url: str) -> bool:
        path = self.local_path(public_url)
        if path is None or not os.path.exists(path):
            return False
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Failed to remove stored file {path}: {e}")
            return False
        logger.info(f"Removed stored file {path}")
        return True
