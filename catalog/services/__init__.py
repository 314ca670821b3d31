"""비즈니스 로직 서비스."""

from catalog.services.catalog_service import CatalogService, ProductPage
from catalog.services.lock_service import RedisLockService

__all__ = ["CatalogService", "ProductPage", "RedisLockService"]
