"""
상품 관련 Pydantic 스키마

API 요청/응답 모델을 정의합니다. 응답 JSON은 camelCase 필드명을 사용합니다.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from catalog.core.identifiers import encode_product_id

T = TypeVar("T")

# 가격/수량 컬럼의 32비트 정수 상한
MAX_INT_VALUE = 2**31 - 1


class CamelModel(BaseModel):
    """camelCase 별칭으로 직렬화하는 기반 모델"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductRequest(BaseModel):
    """
    상품 생성/수정 요청 스키마 (수정은 전체 필드 교체)

    Example:
        {
            "sku": "TEE-001",
            "name": "Classic Tee",
            "description": "100% cotton",
            "currency": "USD",
            "amount": 1999,
            "quantity": 50,
            "category": "tops",
            "tags": ["men", "summer"]
        }
    """

    model_config = ConfigDict(frozen=True)

    sku: str = Field(..., min_length=1, max_length=50, examples=["TEE-001"])
    name: str = Field(..., min_length=1, max_length=255, examples=["Classic Tee"])
    description: Optional[str] = Field(None, max_length=5000)
    currency: str = Field(
        ..., min_length=3, max_length=3, description="ISO 4217", examples=["USD"]
    )
    amount: int = Field(..., ge=0, le=MAX_INT_VALUE, description="최소 통화 단위 가격", examples=[1999])
    quantity: int = Field(..., ge=0, le=MAX_INT_VALUE, description="재고 수량", examples=[50])
    category: Optional[str] = Field(None, max_length=100, examples=["tops"])
    tags: list[str] = Field(default_factory=list, examples=[["men", "summer"]])

    @field_validator("sku", "name", "currency")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default(cls, v: Any) -> Any:
        return [] if v is None else v


class PriceInfo(CamelModel):
    currency: str
    amount: int


class InventoryInfo(CamelModel):
    in_stock: bool
    quantity: int


class ProductResponse(CamelModel):
    """
    상품 정보 응답 스키마

    Example:
        {
            "id": "prod_1",
            "sku": "TEE-001",
            "name": "Classic Tee",
            "description": "100% cotton",
            "price": {"currency": "USD", "amount": 1999},
            "inventory": {"inStock": true, "quantity": 50},
            "category": "tops",
            "tags": ["men", "summer"],
            "createdAt": "2025-01-22T10:30:00Z",
            "updatedAt": "2025-01-22T10:30:00Z"
        }
    """

    id: str = Field(..., description="외부 상품 식별자 (prod_<id>)")
    sku: str
    name: str
    description: Optional[str] = None
    price: PriceInfo
    inventory: InventoryInfo
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=encode_product_id(product.id),
            sku=product.sku,
            name=product.name,
            description=product.description,
            price=PriceInfo(currency=product.currency, amount=product.amount),
            inventory=InventoryInfo(
                in_stock=product.in_stock, quantity=product.quantity
            ),
            category=product.category,
            tags=list(product.tags or []),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class PagedResponse(CamelModel, Generic[T]):
    """페이지 단위 목록 응답 스키마"""

    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int


class InventoryDecrementRequest(BaseModel):
    """
    재고 차감 요청 스키마

    Example:
        {"quantity": 2}
    """

    quantity: int = Field(..., gt=0, le=MAX_INT_VALUE, description="차감 수량 (양수)", examples=[2])


class InventoryDecrementResponse(CamelModel):
    """재고 차감 결과 (재고 부족이면 decremented=false)"""

    id: str
    requested: int
    decremented: bool


class ErrorDetail(CamelModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    trace_id: str


class ErrorResponse(CamelModel):
    error: ErrorDetail
