"""Tests for SqlAlchemyProductRepository."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import exc as sa_exc

from catalog.core.exceptions import (
    ConcurrentModificationException,
    DuplicateSkuException,
    StorageUnavailableException,
)
from catalog.models import Product
from catalog.repositories.product_repository import SqlAlchemyProductRepository

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def add_product(repository, offset_seconds: int = 0, **overrides) -> Product:
    created = BASE_TIME + timedelta(seconds=offset_seconds)
    data = {
        "sku": f"SKU-{offset_seconds}",
        "name": f"Product {offset_seconds}",
        "currency": "USD",
        "amount": 1000,
        "quantity": 5,
        "tags": [],
        "created_at": created,
        "updated_at": created,
    }
    data.update(overrides)
    with repository.transaction("create_product", sku=data["sku"]):
        product = repository.save(Product(**data))
    return product


class TestLookups:
    """Test: 키/SKU 조회"""

    def test_find_by_key(self, repository):
        product = add_product(repository)

        assert repository.find_by_key(product.id).sku == product.sku
        assert repository.find_by_key(999) is None

    def test_find_and_exists_by_sku(self, repository):
        add_product(repository, sku="TEE-001")

        assert repository.find_by_sku("TEE-001") is not None
        assert repository.exists_by_sku("TEE-001") is True
        assert repository.exists_by_sku("tee-001") is False
        assert repository.find_by_sku("missing") is None

    def test_delete_by_key(self, repository):
        product = add_product(repository)

        with repository.transaction("delete_product", product_id=product.id):
            repository.delete_by_key(product.id)

        assert repository.exists_by_key(product.id) is False

    def test_key_not_reused_after_delete(self, repository):
        """Test: 삭제된 키는 재사용되지 않음"""
        first = add_product(repository, 1)
        second = add_product(repository, 2)
        with repository.transaction("delete_product"):
            repository.delete_by_key(second.id)

        third = add_product(repository, 3)

        assert third.id not in (first.id, second.id)


class TestSearch:
    """Test: 검색/정렬/페이지"""

    def test_search_orders_by_created_at_desc(self, repository):
        for i in range(3):
            add_product(repository, i)

        items, total = repository.search(None, None, 0, 10)

        assert total == 3
        assert [p.sku for p in items] == ["SKU-2", "SKU-1", "SKU-0"]

    def test_search_ties_broken_by_id_desc(self, repository):
        a = add_product(repository, 0, sku="A")
        b = add_product(repository, 0, sku="B")

        items, _ = repository.search(None, None, 0, 10)

        assert [p.id for p in items] == [b.id, a.id]

    def test_search_offset_limit_with_full_total(self, repository):
        for i in range(5):
            add_product(repository, i)

        items, total = repository.search(None, None, 2, 2)

        assert total == 5
        assert [p.sku for p in items] == ["SKU-2", "SKU-1"]

    def test_search_query_matches_name_description_or_sku(self, repository):
        add_product(repository, 1, sku="A-1", name="Summer SHIRT")
        add_product(repository, 2, sku="B-1", name="Jeans", description="Goes with any shirt")
        add_product(repository, 3, sku="shirt-99", name="Mystery")
        add_product(repository, 4, sku="C-1", name="Socks", description=None)

        items, total = repository.search("Shirt", None, 0, 10)

        assert total == 3
        assert {p.sku for p in items} == {"A-1", "B-1", "shirt-99"}

    def test_search_category_exact_match(self, repository):
        add_product(repository, 1, category="tops")
        add_product(repository, 2, category="Tops")
        add_product(repository, 3, category="tops-sale")
        add_product(repository, 4, category=None)

        items, total = repository.search(None, "tops", 0, 10)

        assert total == 1
        assert items[0].category == "tops"

    def test_search_query_and_category_combined(self, repository):
        add_product(repository, 1, name="Red Shirt", category="tops")
        add_product(repository, 2, name="Red Shirt Dress", category="dresses")
        add_product(repository, 3, name="Blue Jeans", category="tops")

        items, total = repository.search("shirt", "tops", 0, 10)

        assert total == 1
        assert items[0].name == "Red Shirt"

    def test_search_query_wildcards_are_literal(self, repository):
        """Test: 검색어의 %, _ 는 와일드카드가 아니라 문자 그대로 비교"""
        add_product(repository, 1, name="100% cotton")
        add_product(repository, 2, name="1000 cotton")

        items, total = repository.search("0%", None, 0, 10)

        assert total == 1
        assert items[0].name == "100% cotton"


class TestDecrementQuantity:
    """Test: 조건부 재고 차감"""

    def test_decrement_success(self, repository):
        product = add_product(repository, quantity=5)
        later = BASE_TIME + timedelta(hours=1)

        with repository.transaction("decrement_inventory", product_id=product.id):
            assert repository.decrement_quantity(product.id, 3, later) is True

        refreshed = repository.find_by_key(product.id)
        assert refreshed.quantity == 2
        assert refreshed.version == 2
        assert refreshed.updated_at == later

    def test_decrement_insufficient_leaves_row(self, repository):
        product = add_product(repository, quantity=5)

        with repository.transaction("decrement_inventory", product_id=product.id):
            assert repository.decrement_quantity(product.id, 6, BASE_TIME) is False

        refreshed = repository.find_by_key(product.id)
        assert refreshed.quantity == 5
        assert refreshed.version == 1

    def test_decrement_missing_product(self, repository):
        with repository.transaction("decrement_inventory", product_id=1):
            assert repository.decrement_quantity(1, 1, BASE_TIME) is False


class TestTransaction:
    """Test: 트랜잭션 경계와 예외 변환"""

    def test_rollback_on_error(self, repository):
        product = add_product(repository, name="Original")

        with pytest.raises(RuntimeError):
            with repository.transaction("update_product", product_id=product.id):
                loaded = repository.find_by_key(product.id)
                loaded.name = "Changed"
                repository.save(loaded)
                raise RuntimeError("boom")

        assert repository.find_by_key(product.id).name == "Original"

    def test_unique_violation_becomes_duplicate_sku(self, repository):
        add_product(repository, 1, sku="DUP")

        with pytest.raises(DuplicateSkuException) as exc_info:
            add_product(repository, 2, sku="DUP")

        assert exc_info.value.sku == "DUP"
        assert exc_info.value.details["operation"] == "create_product"
        assert isinstance(exc_info.value.__cause__, sa_exc.IntegrityError)

    def test_stale_version_becomes_concurrent_modification(
        self, file_session_factory
    ):
        """Test: 다른 세션이 먼저 수정하면 버전 충돌"""
        first_session = file_session_factory()
        second_session = file_session_factory()
        first = SqlAlchemyProductRepository(first_session)
        second = SqlAlchemyProductRepository(second_session)
        try:
            product = add_product(first, quantity=5)

            stale = first.find_by_key(product.id)
            fresh = second.find_by_key(product.id)

            with second.transaction("update_product", product_id=product.id):
                fresh.name = "Winner"
                second.save(fresh)

            with pytest.raises(ConcurrentModificationException) as exc_info:
                with first.transaction("update_product", product_id=product.id):
                    stale.name = "Loser"
                    first.save(stale)

            assert exc_info.value.product_id == product.id
            assert first.find_by_key(product.id).name == "Winner"
        finally:
            first_session.close()
            second_session.close()

    def test_operational_error_becomes_storage_unavailable(self, repository, test_db, monkeypatch):
        def broken_execute(*args, **kwargs):
            raise sa_exc.OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(test_db, "execute", broken_execute)

        with pytest.raises(StorageUnavailableException) as exc_info:
            with repository.transaction("decrement_inventory", product_id=7):
                repository.decrement_quantity(7, 1, BASE_TIME)

        assert exc_info.value.details == {"operation": "decrement_inventory", "product_id": 7}
