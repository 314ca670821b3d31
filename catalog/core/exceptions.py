"""
커스텀 예외 정의

카탈로그 서비스가 호출자에게 보고하는 실패 유형입니다.
모든 예외는 안정적인 code 문자열과 details(작업명, 필드, 값)를 가지며,
API 계층에서 HTTP 상태 코드로 변환됩니다.
"""

from typing import Any, Optional


class CatalogException(Exception):
    """카탈로그 예외의 기반 클래스"""

    code = "CATALOG_ERROR"
    retryable = False

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidIdentifierException(CatalogException):
    """
    상품 식별자 문자열을 내부 키로 해석할 수 없을 때 발생하는 예외

    HTTP Status Code: 400 Bad Request
    """

    code = "INVALID_IDENTIFIER"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Invalid product ID format: '{identifier}'",
            {"field": "id", "value": identifier},
        )


class ProductNotFoundException(CatalogException):
    """
    상품을 찾을 수 없을 때 발생하는 예외

    HTTP Status Code: 404 Not Found
    """

    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int, operation: str = "get_product"):
        self.product_id = product_id
        super().__init__(
            f"Product not found with id: {product_id}",
            {"operation": operation, "field": "id", "value": product_id},
        )


class DuplicateSkuException(CatalogException):
    """
    이미 사용 중인 SKU로 상품을 생성하거나 변경하려 할 때 발생하는 예외

    HTTP Status Code: 409 Conflict
    """

    code = "DUPLICATE_SKU"

    def __init__(self, sku: str, operation: str = "create_product"):
        self.sku = sku
        super().__init__(
            f"Product with SKU '{sku}' already exists",
            {"operation": operation, "field": "sku", "value": sku},
        )


class InvalidQuantityException(CatalogException):
    """
    음수 수량으로 재고 차감을 요청했을 때 발생하는 예외

    HTTP Status Code: 400 Bad Request
    """

    code = "INVALID_QUANTITY"

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(
            f"Quantity must be non-negative: {quantity}",
            {"operation": "decrement_inventory", "field": "quantity", "value": quantity},
        )


class ConcurrentModificationException(CatalogException):
    """
    낙관적 락 버전 충돌이 재시도 후에도 해소되지 않았을 때 발생하는 예외

    호출자가 그대로 다시 요청할 수 있습니다.

    HTTP Status Code: 409 Conflict
    """

    code = "CONCURRENT_MODIFICATION"
    retryable = True

    def __init__(self, product_id: int, operation: str = "update_product"):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} was modified concurrently, please retry",
            {"operation": operation, "field": "id", "value": product_id},
        )


class LockAcquisitionException(CatalogException):
    """
    락 획득 실패 시 발생하는 예외

    HTTP Status Code: 409 Conflict
    """

    code = "LOCK_UNAVAILABLE"
    retryable = True

    def __init__(self, resource: str, message: str = "Failed to acquire lock"):
        self.resource = resource
        super().__init__(f"{message} for resource: {resource}", {"resource": resource})


class StorageUnavailableException(CatalogException):
    """
    저장소(DB, Redis)에 접근할 수 없을 때 발생하는 예외

    원인 예외는 __cause__로 연결됩니다.

    HTTP Status Code: 503 Service Unavailable
    """

    code = "STORAGE_UNAVAILABLE"
    retryable = True

    def __init__(self, operation: str, **context: Any):
        self.operation = operation
        super().__init__(
            f"Storage unavailable during {operation}",
            {"operation": operation, **context},
        )
