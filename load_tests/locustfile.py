"""
Locust 부하 테스트 시나리오

테스트 시나리오:
1. 재고 차감 경쟁: 여러 사용자가 같은 상품의 재고를 1개씩 차감
2. 블랙프라이데이: 1000명이 100개 재고 경쟁
3. 검색/조회 혼합 부하

정확도 목표: 초과 판매 0건
(성공한 차감 수 <= 초기 재고, 최종 재고 = 초기 재고 - 성공한 차감 수)
"""

import os
from typing import Optional

import requests
from locust import HttpUser, TaskSet, between, events, task

INITIAL_STOCK = int(os.getenv("LOAD_TEST_INITIAL_STOCK", "100"))

# 전역 메트릭 수집
successful_decrements = 0
rejected_decrements = 0
negative_stock_seen = 0
target_product_id: Optional[str] = None


class CatalogTaskSet(TaskSet):
    """카탈로그 사용자 행동 모델"""

    def on_start(self):
        self.product_id: Optional[str] = None

    def _pick_product(self):
        """가장 최근에 생성된 상품을 대상으로 선택"""
        global target_product_id

        with self.client.get(
            "/api/products",
            params={"pageSize": 1},
            name="[Product] List Products",
            catch_response=True,
        ) as response:
            if response.status_code != 200:
                response.failure(f"List products failed: {response.status_code}")
                return
            items = response.json()["items"]
            if items:
                self.product_id = items[0]["id"]
                target_product_id = self.product_id
            response.success()

    @task(3)
    def view_product(self):
        """상품 조회 (재고 음수 감지)"""
        if not self.product_id:
            self._pick_product()
            if not self.product_id:
                return

        global negative_stock_seen

        with self.client.get(
            f"/api/products/{self.product_id}",
            name="[Product] Get Product",
            catch_response=True,
        ) as response:
            if response.status_code != 200:
                response.failure(f"Get product failed: {response.status_code}")
                return
            inventory = response.json()["inventory"]
            if inventory["quantity"] < 0:
                negative_stock_seen += 1
                response.failure("Negative stock detected! OVERSOLD!")
            elif inventory["inStock"] != (inventory["quantity"] > 0):
                response.failure("inStock does not match quantity")
            else:
                response.success()

    @task(2)
    def search_products(self):
        """상품 검색"""
        with self.client.get(
            "/api/products",
            params={"query": "load", "page": 1},
            name="[Product] Search",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Search failed: {response.status_code}")

    @task(5)
    def decrement_inventory(self):
        """재고 차감 (핵심 동시성 테스트)"""
        if not self.product_id:
            self._pick_product()
            if not self.product_id:
                return

        global successful_decrements, rejected_decrements

        with self.client.post(
            f"/api/products/{self.product_id}/inventory/decrement",
            json={"quantity": 1},
            name="[Inventory] Decrement",
            catch_response=True,
        ) as response:
            if response.status_code != 200:
                response.failure(f"Decrement failed: {response.status_code}")
                return
            if response.json()["decremented"]:
                successful_decrements += 1
            else:
                # 재고 부족은 예상된 결과
                rejected_decrements += 1
            response.success()


class NormalUser(HttpUser):
    """일반 사용자"""

    tasks = [CatalogTaskSet]
    wait_time = between(1, 3)
    host = "http://localhost:8080"


class AggressiveBuyer(HttpUser):
    """공격적인 구매자 (블랙프라이데이 시나리오)"""

    tasks = [CatalogTaskSet]
    wait_time = between(0.1, 0.5)
    host = "http://localhost:8080"


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """테스트 시작 시 초기화"""
    global successful_decrements, rejected_decrements, negative_stock_seen
    successful_decrements = 0
    rejected_decrements = 0
    negative_stock_seen = 0

    print("\n" + "=" * 60)
    print("Locust Load Test Started")
    print("=" * 60)
    print(f"Target: {environment.host}")
    print(f"Initial stock: {INITIAL_STOCK}")
    print("=" * 60 + "\n")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """테스트 종료 시 결과 출력"""
    final_quantity = None
    if target_product_id is not None:
        response = requests.get(
            f"{environment.host}/api/products/{target_product_id}", timeout=5
        )
        if response.status_code == 200:
            final_quantity = response.json()["inventory"]["quantity"]

    print("\n" + "=" * 60)
    print("Test Results Summary")
    print("=" * 60)
    print(f"Successful decrements: {successful_decrements}")
    print(f"Rejected (insufficient stock): {rejected_decrements}")
    print(f"Negative stock observed: {negative_stock_seen}")
    print(f"Final quantity: {final_quantity}")
    print("=" * 60)

    oversold = successful_decrements > INITIAL_STOCK or negative_stock_seen > 0
    if final_quantity is not None and final_quantity != INITIAL_STOCK - successful_decrements:
        print("FAIL: Final quantity does not match successful decrements.")
    elif oversold:
        print("FAIL: Overselling detected!")
    else:
        print("PASS: No overselling detected.")

    print("=" * 60 + "\n")


"""
기본 실행 (웹 UI):
    locust -f load_tests/locustfile.py --host=http://localhost:8080

헤드리스 모드 (CLI):
    # 100명 동시 차감 (60초)
    locust -f load_tests/locustfile.py --headless --users 100 --spawn-rate 10 -t 60s --host=http://localhost:8080

    # 블랙프라이데이 (1000명, 3분)
    locust -f load_tests/locustfile.py --headless --users 1000 --spawn-rate 50 -t 3m --host=http://localhost:8080 AggressiveBuyer
"""
