"""
Redis 클라이언트 연결 관리

Redis는 SKU 선점 락에만 사용하며, redis_host가 비어 있으면 사용하지 않습니다.
"""

from typing import Generator, Optional

from fastapi import Depends
from redis import Redis

from catalog.core.config import Settings, get_settings


def create_redis_client(settings: Settings) -> Redis:
    """
    Redis 클라이언트 생성

    Args:
        settings: 애플리케이션 설정 객체

    Returns:
        Redis 클라이언트 인스턴스
    """
    return Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password if settings.redis_password else None,
        decode_responses=True,
        socket_timeout=settings.lock_timeout_seconds,
    )


def get_redis_client(
    settings: Settings = Depends(get_settings),
) -> Generator[Optional[Redis], None, None]:
    """
    FastAPI 의존성 주입용 Redis 클라이언트 생성 함수

    Args:
        settings: 애플리케이션 설정 (의존성 주입)

    Yields:
        Redis 클라이언트 인스턴스, Redis가 설정되지 않았으면 None
    """
    if not settings.redis_enabled:
        yield None
        return

    client = create_redis_client(settings)
    try:
        yield client
    finally:
        client.close()
