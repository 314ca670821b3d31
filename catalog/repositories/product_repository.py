"""
상품 저장소 (Catalog Store)

서비스 계층은 ``ProductRepository`` 추상 클래스에만 의존하고,
``SqlAlchemyProductRepository``가 SQLAlchemy 세션으로 이를 구현합니다.

트랜잭션 경계는 ``transaction()`` 컨텍스트가 담당합니다.
- 정상 종료 시 커밋, 예외 발생 시 롤백
- sku 유니크 제약 위반(IntegrityError) → DuplicateSkuException
- 버전 충돌(StaleDataError) → ConcurrentModificationException
- 연결/타임아웃 오류 → StorageUnavailableException
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from catalog.core.exceptions import (
    ConcurrentModificationException,
    DuplicateSkuException,
    StorageUnavailableException,
)
from catalog.models import Product

logger = structlog.get_logger(__name__)


class ProductRepository(ABC):
    """상품 저장소 계약"""

    @abstractmethod
    def transaction(self, operation: str, **context: Any):
        """하나의 작업을 단일 트랜잭션으로 실행하는 컨텍스트 매니저."""

    @abstractmethod
    def find_by_key(self, key: int) -> Optional[Product]:
        """내부 키로 상품을 조회합니다."""

    @abstractmethod
    def find_by_sku(self, sku: str) -> Optional[Product]:
        """SKU로 상품을 조회합니다 (정확히 일치)."""

    @abstractmethod
    def exists_by_sku(self, sku: str) -> bool:
        """SKU를 가진 상품이 있는지 확인합니다."""

    @abstractmethod
    def exists_by_key(self, key: int) -> bool:
        """내부 키를 가진 상품이 있는지 확인합니다."""

    @abstractmethod
    def save(self, product: Product) -> Product:
        """상품을 추가하거나 전체 교체합니다. 신규 상품이면 키가 할당됩니다."""

    @abstractmethod
    def delete_by_key(self, key: int) -> None:
        """상품을 영구 삭제합니다."""

    @abstractmethod
    def search(
        self,
        query: Optional[str],
        category: Optional[str],
        offset: int,
        limit: int,
    ) -> tuple[list[Product], int]:
        """필터링된 상품을 created_at 내림차순으로 조회하고 전체 건수를 함께 반환합니다."""

    @abstractmethod
    def decrement_quantity(self, key: int, quantity: int, now: datetime) -> bool:
        """
        재고가 충분할 때만 원자적으로 차감합니다.

        Returns:
            차감되었으면 True, 재고 부족 또는 상품이 없으면 False
        """


class SqlAlchemyProductRepository(ProductRepository):
    """SQLAlchemy 세션 기반 상품 저장소"""

    def __init__(self, db: Session):
        self._db = db

    @contextmanager
    def transaction(self, operation: str, **context: Any) -> Iterator[None]:
        """
        작업 단위 트랜잭션

        Args:
            operation: 작업명 (예외 details에 포함)
            context: 예외 변환에 사용할 문맥 (sku, product_id 등)
        """
        try:
            yield
            self._db.commit()
        except sa_exc.IntegrityError as e:
            self._db.rollback()
            if "sku" in str(e.orig).lower() and context.get("sku") is not None:
                raise DuplicateSkuException(context["sku"], operation) from e
            raise
        except StaleDataError as e:
            self._db.rollback()
            raise ConcurrentModificationException(
                context.get("product_id"), operation
            ) from e
        except (
            sa_exc.OperationalError,
            sa_exc.InterfaceError,
            sa_exc.TimeoutError,
        ) as e:
            self._db.rollback()
            logger.error("storage.unavailable", operation=operation, **context)
            raise StorageUnavailableException(operation, **context) from e
        except Exception:
            self._db.rollback()
            raise

    def find_by_key(self, key: int) -> Optional[Product]:
        # 세션에 남은 이전 상태가 아니라 DB의 현재 값(버전 포함)을 읽음
        return self._db.get(Product, key, populate_existing=True)

    def find_by_sku(self, sku: str) -> Optional[Product]:
        return self._db.scalars(select(Product).where(Product.sku == sku)).first()

    def exists_by_sku(self, sku: str) -> bool:
        stmt = select(Product.id).where(Product.sku == sku).limit(1)
        return self._db.scalar(stmt) is not None

    def exists_by_key(self, key: int) -> bool:
        stmt = select(Product.id).where(Product.id == key).limit(1)
        return self._db.scalar(stmt) is not None

    def save(self, product: Product) -> Product:
        # flush로 INSERT/UPDATE를 즉시 실행해 키 할당과 제약 위반을 여기서 확인
        self._db.add(product)
        self._db.flush()
        return product

    def delete_by_key(self, key: int) -> None:
        product = self.find_by_key(key)
        if product is not None:
            self._db.delete(product)
            self._db.flush()

    def search(
        self,
        query: Optional[str],
        category: Optional[str],
        offset: int,
        limit: int,
    ) -> tuple[list[Product], int]:
        stmt = select(Product)

        if query is not None:
            stmt = stmt.where(
                or_(
                    Product.name.icontains(query, autoescape=True),
                    Product.description.icontains(query, autoescape=True),
                    Product.sku.icontains(query, autoescape=True),
                )
            )

        if category is not None:
            stmt = stmt.where(Product.category == category)

        total = self._db.scalar(select(func.count()).select_from(stmt.subquery()))

        # 동일 시각 생성 건은 id 내림차순으로 순서 고정
        page_stmt = (
            stmt.order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset)
            .limit(limit)
        )
        items = list(self._db.scalars(page_stmt).all())
        return items, total or 0

    def decrement_quantity(self, key: int, quantity: int, now: datetime) -> bool:
        # 조건부 UPDATE 한 문장으로 확인과 차감을 처리 (읽기-후-쓰기 경쟁 없음)
        stmt = (
            update(Product)
            .where(Product.id == key, Product.quantity >= quantity)
            .values(
                quantity=Product.quantity - quantity,
                version=Product.version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = self._db.execute(stmt)

        if result.rowcount == 1:
            # 세션에 로드된 객체가 있다면 이전 재고/버전을 들고 있으므로 만료
            self._db.expire_all()
            return True
        return False
