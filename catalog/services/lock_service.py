"""Redis 락을 이용한 SKU 선점 서비스."""

import time
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from catalog.core.config import Settings
from catalog.core.exceptions import (
    LockAcquisitionException,
    StorageUnavailableException,
)

logger = structlog.get_logger(__name__)

# 락 ID가 일치할 때만 삭제 (GET + 비교 + DEL을 원자적으로 실행)
RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
else
    return 0
end
"""


class RedisLockService:
    """
    SET NX EX 기반 분산 락

    같은 SKU를 동시에 생성/변경하려는 요청을 DB에 도달하기 전에 직렬화합니다.
    최종 유일성 보장은 DB의 sku 유니크 제약이 담당합니다.
    """

    def __init__(self, redis: Redis, settings: Settings):
        self._redis = redis
        self._settings = settings

    @staticmethod
    def _get_lock_key(resource: str) -> str:
        return f"lock:{resource}"

    def _acquire_lock(self, resource: str) -> Optional[str]:
        """
        TTL을 설정하여 SETNX로 락을 획득합니다.

        Returns:
            획득 성공 시 락 ID (UUID), 이미 락이 점유 중이면 None
        """
        lock_id = str(uuid.uuid4())
        acquired = self._redis.set(
            self._get_lock_key(resource),
            lock_id,
            nx=True,
            ex=self._settings.lock_timeout_seconds,
        )
        return lock_id if acquired else None

    def _release_lock(self, resource: str, lock_id: str) -> bool:
        """내가 획득한 락만 해제합니다."""
        result = self._redis.eval(
            RELEASE_SCRIPT, 1, self._get_lock_key(resource), lock_id
        )
        return bool(result)

    @contextmanager
    def hold(self, resource: str) -> Iterator[str]:
        """
        재시도를 포함해 락을 획득하고, 블록 종료 시 항상 해제합니다.

        Args:
            resource: 락 대상 (예: "sku:TEE-001")

        Yields:
            획득한 락 ID

        Raises:
            LockAcquisitionException: 재시도 횟수를 모두 소진한 경우
            StorageUnavailableException: Redis에 연결할 수 없는 경우
        """
        max_retries = self._settings.lock_retry_attempts
        retry_delay = self._settings.lock_retry_delay_ms / 1000.0

        lock_id = None
        try:
            for attempt in range(max_retries):
                lock_id = self._acquire_lock(resource)
                if lock_id is not None:
                    break
                if attempt < max_retries - 1:
                    time.sleep(retry_delay)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailableException("acquire_lock", resource=resource) from e

        if lock_id is None:
            logger.warning("lock.exhausted", resource=resource, attempts=max_retries)
            raise LockAcquisitionException(
                resource,
                f"Failed to acquire lock after {max_retries} retries",
            )

        try:
            yield lock_id
        finally:
            try:
                self._release_lock(resource, lock_id)
            except (RedisConnectionError, RedisTimeoutError):
                # TTL이 지나면 자동 해제됨
                logger.warning("lock.release_failed", resource=resource)
