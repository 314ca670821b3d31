#!/usr/bin/env python3
"""
테스트 데이터 초기화 스크립트

부하 테스트 실행 전 대상 상품을 생성합니다.
"""

import argparse
import sys
import uuid

import requests


def create_test_product(base_url: str, name: str, stock: int) -> dict:
    """테스트 상품 생성 (SKU는 매 실행마다 새로 생성)"""
    response = requests.post(
        f"{base_url}/api/products",
        json={
            "sku": f"LOAD-{uuid.uuid4().hex[:8].upper()}",
            "name": name,
            "description": f"Load test product - {stock} units available",
            "currency": "KRW",
            "amount": 10000,
            "quantity": stock,
            "category": "load-test",
            "tags": ["load"],
        },
        timeout=5,
    )

    if response.status_code != 201:
        print(f"Product creation failed: {response.status_code}")
        print(response.text)
        sys.exit(1)

    product = response.json()
    print(f"Product created: {product['name']} (ID: {product['id']}, Stock: {stock})")
    return product


def check_health(base_url: str) -> bool:
    """서버 헬스체크"""
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def main():
    parser = argparse.ArgumentParser(description="Setup test data for load testing")
    parser.add_argument(
        "--host",
        default="http://localhost:8080",
        help="API server host (default: http://localhost:8080)",
    )
    parser.add_argument(
        "--scenario",
        choices=["basic", "stress", "custom"],
        default="basic",
        help="Test scenario preset",
    )
    parser.add_argument(
        "--stock",
        type=int,
        default=100,
        help="Initial stock for custom scenario (default: 100)",
    )

    args = parser.parse_args()

    print(f"Target: {args.host}, scenario: {args.scenario}")

    if not check_health(args.host):
        print(f"Server is not reachable at {args.host}")
        sys.exit(1)

    if args.scenario == "basic":
        create_test_product(args.host, "Load Test Product", 100)
    elif args.scenario == "stress":
        create_test_product(args.host, "Black Friday Limited Edition", 100)
    else:
        create_test_product(args.host, "Custom Load Test Product", args.stock)

    print("\nYou can now run Locust tests:")
    print(f"  LOAD_TEST_INITIAL_STOCK={args.stock if args.scenario == 'custom' else 100} \\")
    print(f"  locust -f load_tests/locustfile.py --host={args.host}")


if __name__ == "__main__":
    main()
