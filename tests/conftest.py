"""
pytest 픽스처 정의
"""

import os
from datetime import datetime, timedelta, timezone

# 앱 lifespan의 init_db가 작업 디렉터리에 파일 DB를 만들지 않도록 함
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, Session

from catalog.api.deps import get_catalog_service
from catalog.core.config import Settings, get_settings
from catalog.db.database import Base
from catalog.main import app
from catalog.repositories.product_repository import SqlAlchemyProductRepository
from catalog.schemas.product import ProductRequest
from catalog.services.catalog_service import CatalogService

import catalog.models  # noqa: F401  (Base.metadata에 모델 등록)


class FakeClock:
    """호출할 때마다 1초씩 증가하는 시계 (생성 순서를 결정적으로 만듦)"""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def make_request(**overrides) -> ProductRequest:
    """기본값을 채운 ProductRequest 생성 헬퍼"""
    data = {
        "sku": "TEE-001",
        "name": "Classic Tee",
        "description": "100% cotton t-shirt",
        "currency": "USD",
        "amount": 1999,
        "quantity": 50,
        "category": "tops",
        "tags": ["men", "summer"],
    }
    data.update(overrides)
    return ProductRequest(**data)


@pytest.fixture(scope="session")
def settings():
    """테스트용 설정 객체 픽스처"""
    return Settings(
        database_url="sqlite:///:memory:",
        default_page_size=20,
        max_page_size=100,
        redis_host="",
        lock_timeout_seconds=10,
        lock_retry_attempts=3,
        lock_retry_delay_ms=10,
        conflict_retry_attempts=3,
    )


@pytest.fixture(scope="function")
def test_db() -> Session:
    """
    테스트용 in-memory SQLite 데이터베이스 세션 픽스처

    각 테스트 함수마다 새로운 데이터베이스를 생성하고,
    테스트 종료 후 테이블을 삭제하여 격리를 보장합니다.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # TestClient 워커 스레드와 같은 in-memory DB 공유
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def file_session_factory(tmp_path):
    """
    파일 기반 SQLite 세션 팩토리 픽스처

    여러 스레드가 각자의 연결로 같은 DB에 접근하는 동시성 테스트용입니다.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'catalog_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)

    factory = sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )
    yield factory

    engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(test_db: Session) -> SqlAlchemyProductRepository:
    return SqlAlchemyProductRepository(test_db)


@pytest.fixture
def service(repository, settings, clock) -> CatalogService:
    """Redis 락 없이 동작하는 CatalogService"""
    return CatalogService(repository, settings, clock=clock)


@pytest.fixture(scope="function")
def test_client(test_db, settings, clock):
    """각 테스트마다 테스트 데이터베이스와 설정을 주입한 TestClient"""

    def override_get_catalog_service():
        return CatalogService(SqlAlchemyProductRepository(test_db), settings, clock=clock)

    def override_get_settings():
        return settings

    app.dependency_overrides[get_catalog_service] = override_get_catalog_service
    app.dependency_overrides[get_settings] = override_get_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def product_factory():
    """ProductRequest 생성 함수를 반환하는 픽스처"""
    return make_request
