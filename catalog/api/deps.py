"""
FastAPI 의존성 주입 함수들

데이터베이스 세션, 설정, Redis 락을 묶어 CatalogService를 제공합니다.
"""

from typing import Optional

from fastapi import Depends
from redis import Redis
from sqlalchemy.orm import Session

from catalog.core.config import Settings, get_settings
from catalog.db.database import get_db
from catalog.db.redis_client import get_redis_client
from catalog.repositories.product_repository import SqlAlchemyProductRepository
from catalog.services.catalog_service import CatalogService
from catalog.services.lock_service import RedisLockService


def get_catalog_service(
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis_client),
    settings: Settings = Depends(get_settings),
) -> CatalogService:
    """
    요청 단위 CatalogService 생성

    Redis가 설정되지 않았으면 SKU 락 없이 DB 유니크 제약만으로 동작합니다.
    """
    lock_service = RedisLockService(redis, settings) if redis is not None else None
    return CatalogService(
        SqlAlchemyProductRepository(db), settings, lock_service=lock_service
    )
