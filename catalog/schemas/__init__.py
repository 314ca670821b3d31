"""
Pydantic 스키마 모듈
"""

from catalog.schemas.product import (
    ErrorResponse,
    InventoryDecrementRequest,
    InventoryDecrementResponse,
    PagedResponse,
    ProductRequest,
    ProductResponse,
)

__all__ = [
    "ErrorResponse",
    "InventoryDecrementRequest",
    "InventoryDecrementResponse",
    "PagedResponse",
    "ProductRequest",
    "ProductResponse",
]
