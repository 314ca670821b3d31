"""
상품 카탈로그 서비스

상품 CRUD, 검색/페이지네이션, 재고 차감을 담당합니다.

서비스가 보장하는 불변식:
- sku는 살아 있는 상품 사이에서 유일 (대소문자 구분, 정확히 일치)
- quantity >= 0, in_stock == (quantity > 0)
- amount >= 0
- 키는 재사용되지 않고 변경되지 않음

동시성 제어:
- 재고 차감은 조건부 UPDATE 한 문장으로 처리 (초과 판매 없음)
- 수정은 버전 컬럼 기반 낙관적 락, 충돌 시 conflict_retry_attempts 만큼 재시도
- SKU 유일성은 DB 유니크 제약으로 최종 보장, Redis가 설정되어 있으면
  같은 SKU에 대한 생성/수정을 락으로 직렬화
"""

import math
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import structlog

from catalog.core.config import Settings
from catalog.core.exceptions import (
    ConcurrentModificationException,
    DuplicateSkuException,
    InvalidQuantityException,
    ProductNotFoundException,
)
from catalog.core.identifiers import MAX_PRODUCT_KEY, decode_product_id
from catalog.db.types import utcnow
from catalog.models import Product
from catalog.repositories.product_repository import ProductRepository
from catalog.schemas.product import ProductRequest
from catalog.services.lock_service import RedisLockService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProductPage:
    """검색 결과의 한 페이지"""

    items: list[Product]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def normalize_page(page: Optional[int]) -> int:
    """페이지 번호(1부터 시작)를 보정합니다. 없거나 0 이하이면 1."""
    if page is None or page <= 0:
        return 1
    return page


def normalize_page_size(page_size: Optional[int], settings: Settings) -> int:
    """페이지 크기를 보정합니다. 없거나 0 이하이면 기본값, 최대값을 넘으면 최대값."""
    if page_size is None or page_size <= 0:
        return settings.default_page_size
    return min(page_size, settings.max_page_size)


class CatalogService:
    """상품 카탈로그 서비스"""

    def __init__(
        self,
        repository: ProductRepository,
        settings: Settings,
        lock_service: Optional[RedisLockService] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repo = repository
        self._settings = settings
        self._lock_service = lock_service
        self._clock = clock

    def _claim_sku(self, sku: str):
        """Redis가 설정된 경우 SKU 락을 잡고, 아니면 아무것도 하지 않습니다."""
        if self._lock_service is None:
            return nullcontext()
        return self._lock_service.hold(f"sku:{sku}")

    @staticmethod
    def _apply_request(product: Product, request: ProductRequest) -> None:
        # in_stock은 quantity에서 계산되므로 따로 설정하지 않음
        product.sku = request.sku
        product.name = request.name
        product.description = request.description
        product.currency = request.currency
        product.amount = request.amount
        product.quantity = request.quantity
        product.category = request.category
        product.tags = list(request.tags)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def list_products(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        query: Optional[str] = None,
        category: Optional[str] = None,
    ) -> ProductPage:
        """
        필터링된 상품 목록을 생성일 내림차순으로 페이지 단위 조회합니다.

        범위를 벗어난 page/page_size는 오류 없이 보정합니다.

        Args:
            page: 1부터 시작하는 페이지 번호
            page_size: 페이지 크기 (최대 max_page_size)
            query: name, description, sku 중 하나에 포함되면 일치 (대소문자 무시)
            category: 정확히 일치하는 분류

        Returns:
            ProductPage
        """
        actual_page_size = normalize_page_size(page_size, self._settings)
        # offset이 저장소의 64비트 정수 범위를 넘지 않도록 페이지 번호 상한 적용
        actual_page = min(normalize_page(page), MAX_PRODUCT_KEY // actual_page_size + 1)
        offset = (actual_page - 1) * actual_page_size

        with self._repo.transaction("list_products", query=query, category=category):
            items, total_items = self._repo.search(
                query, category, offset, actual_page_size
            )

        logger.debug(
            "product.listed",
            page=actual_page,
            page_size=actual_page_size,
            query=query,
            category=category,
            total_items=total_items,
        )
        return ProductPage(
            items=items,
            page=actual_page,
            page_size=actual_page_size,
            total_items=total_items,
            total_pages=math.ceil(total_items / actual_page_size),
        )

    def get_product(self, product_id: str) -> Product:
        """
        식별자("prod_42" 또는 "42")로 상품을 조회합니다.

        Raises:
            InvalidIdentifierException: 식별자 형식이 잘못된 경우
            ProductNotFoundException: 상품이 없는 경우
        """
        key = decode_product_id(product_id)
        with self._repo.transaction("get_product", product_id=key):
            product = self._repo.find_by_key(key)
            if product is None:
                raise ProductNotFoundException(key, "get_product")
        return product

    # ------------------------------------------------------------------
    # 변경
    # ------------------------------------------------------------------

    def create_product(self, request: ProductRequest) -> Product:
        """
        상품을 생성합니다.

        Raises:
            DuplicateSkuException: 같은 SKU의 상품이 이미 있는 경우
            LockAcquisitionException: SKU 락을 얻지 못한 경우 (Redis 사용 시)
        """
        log = logger.bind(sku=request.sku)

        with self._claim_sku(request.sku):
            with self._repo.transaction("create_product", sku=request.sku):
                if self._repo.exists_by_sku(request.sku):
                    log.warning("product.duplicate_sku")
                    raise DuplicateSkuException(request.sku, "create_product")

                now = self._clock()
                product = Product(created_at=now, updated_at=now)
                self._apply_request(product, request)
                product = self._repo.save(product)

        log.info("product.created", product_id=product.id)
        return product

    def update_product(self, product_id: str, request: ProductRequest) -> Product:
        """
        상품의 모든 변경 가능 필드를 요청 값으로 교체합니다.

        다른 요청과 버전 충돌이 나면 최신 상태를 다시 읽어 재시도합니다.

        Raises:
            InvalidIdentifierException: 식별자 형식이 잘못된 경우
            ProductNotFoundException: 상품이 없는 경우
            DuplicateSkuException: 다른 상품이 이미 사용 중인 SKU로 바꾸려는 경우
            ConcurrentModificationException: 재시도 후에도 충돌이 계속되는 경우
        """
        key = decode_product_id(product_id)
        attempts = max(1, self._settings.conflict_retry_attempts)

        for attempt in range(1, attempts + 1):
            try:
                return self._update_once(key, request)
            except ConcurrentModificationException:
                if attempt == attempts:
                    logger.warning(
                        "product.update_conflict", product_id=key, attempts=attempts
                    )
                    raise
                logger.info("product.update_retry", product_id=key, attempt=attempt)

        raise ConcurrentModificationException(key)

    def _update_once(self, key: int, request: ProductRequest) -> Product:
        with self._claim_sku(request.sku):
            with self._repo.transaction(
                "update_product", product_id=key, sku=request.sku
            ):
                product = self._repo.find_by_key(key)
                if product is None:
                    raise ProductNotFoundException(key, "update_product")

                # 자기 자신의 SKU를 그대로 쓰는 것은 충돌이 아님
                if product.sku != request.sku and self._repo.exists_by_sku(
                    request.sku
                ):
                    logger.warning(
                        "product.duplicate_sku", product_id=key, sku=request.sku
                    )
                    raise DuplicateSkuException(request.sku, "update_product")

                self._apply_request(product, request)
                product.updated_at = self._clock()
                product = self._repo.save(product)

        logger.info("product.updated", product_id=key)
        return product

    def delete_product(self, product_id: str) -> None:
        """
        상품을 영구 삭제합니다.

        Raises:
            InvalidIdentifierException: 식별자 형식이 잘못된 경우
            ProductNotFoundException: 상품이 없는 경우
        """
        key = decode_product_id(product_id)
        with self._repo.transaction("delete_product", product_id=key):
            if not self._repo.exists_by_key(key):
                raise ProductNotFoundException(key, "delete_product")
            self._repo.delete_by_key(key)

        logger.info("product.deleted", product_id=key)

    def decrement_inventory(self, key: int, quantity: int) -> bool:
        """
        재고를 차감합니다.

        재고 부족은 오류가 아니라 False 반환이며, 이 경우 아무것도 바뀌지 않습니다.

        Args:
            key: 상품 내부 키
            quantity: 차감할 수량 (0 이상)

        Returns:
            차감 성공 시 True, 재고 부족 시 False

        Raises:
            InvalidQuantityException: 수량이 음수인 경우
            ProductNotFoundException: 상품이 없는 경우
        """
        if quantity < 0:
            raise InvalidQuantityException(quantity)

        log = logger.bind(product_id=key, requested=quantity)

        if key > MAX_PRODUCT_KEY:
            raise ProductNotFoundException(key, "decrement_inventory")

        if quantity > MAX_PRODUCT_KEY:
            # 저장 가능한 어떤 재고보다 큼, 존재 여부만 확인
            with self._repo.transaction("decrement_inventory", product_id=key):
                if not self._repo.exists_by_key(key):
                    raise ProductNotFoundException(key, "decrement_inventory")
            log.warning("inventory.insufficient")
            return False

        with self._repo.transaction("decrement_inventory", product_id=key):
            if self._repo.decrement_quantity(key, quantity, self._clock()):
                log.info("inventory.decremented")
                return True

            if not self._repo.exists_by_key(key):
                raise ProductNotFoundException(key, "decrement_inventory")

        log.warning("inventory.insufficient")
        return False
