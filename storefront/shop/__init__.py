# storefront/shop/__init__.py
from __future__ import annotations


class ShopError(Exception):
    """A business-rule failure that maps straight onto an HTTP error response."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
