"""상품 저장소."""

from catalog.repositories.product_repository import (
    ProductRepository,
    SqlAlchemyProductRepository,
)

__all__ = ["ProductRepository", "SqlAlchemyProductRepository"]
