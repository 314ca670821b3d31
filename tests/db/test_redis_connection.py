"""
Redis 연결 테스트

REDIS_HOST가 설정되어 있고 서버에 접속 가능할 때만 실행됩니다.
"""

import pytest
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.core.config import Settings
from catalog.db.redis_client import create_redis_client, get_redis_client
from catalog.services.lock_service import RedisLockService


@pytest.fixture
def redis_settings():
    settings = Settings()
    if not settings.redis_enabled:
        pytest.skip("REDIS_HOST not configured")
    return settings


@pytest.fixture
def redis_client(redis_settings):
    client = create_redis_client(redis_settings)
    try:
        client.ping()
    except RedisConnectionError:
        client.close()
        pytest.skip("Redis server not reachable")
    yield client
    client.close()


def test_get_redis_client_disabled():
    """redis_host가 비어 있으면 None을 주입"""
    settings = Settings(_env_file=None, redis_host="")

    dependency = get_redis_client(settings)

    assert next(dependency) is None


def test_create_redis_client(redis_settings):
    """create_redis_client 함수가 Redis 클라이언트를 반환하는지 테스트"""
    client = create_redis_client(redis_settings)

    assert isinstance(client, Redis)
    client.close()


def test_redis_ping(redis_client):
    """Redis 연결 확인 (PING 테스트)"""
    assert redis_client.ping() is True


def test_lock_round_trip(redis_client, redis_settings):
    """실제 Redis에서 락 획득/해제"""
    lock_service = RedisLockService(redis_client, redis_settings)
    lock_key = RedisLockService._get_lock_key("sku:IT-REDIS")

    with lock_service.hold("sku:IT-REDIS") as lock_id:
        assert redis_client.get(lock_key) == lock_id
        assert lock_service._acquire_lock("sku:IT-REDIS") is None

    assert redis_client.get(lock_key) is None
