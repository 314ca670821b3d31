"""
상품 카탈로그 API 엔드포인트

상품 목록 검색, 조회, 생성, 수정, 삭제, 재고 차감 기능을 제공합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalog.api.deps import get_catalog_service
from catalog.core.identifiers import decode_product_id, encode_product_id
from catalog.schemas.product import (
    InventoryDecrementRequest,
    InventoryDecrementResponse,
    PagedResponse,
    ProductRequest,
    ProductResponse,
)
from catalog.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/products", response_model=PagedResponse[ProductResponse])
def list_products(
    page: Optional[int] = Query(None, description="1부터 시작하는 페이지 번호"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="페이지 크기"),
    query: Optional[str] = Query(None, description="name/description/sku 부분 검색"),
    category: Optional[str] = Query(None, description="분류 (정확히 일치)"),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    상품 목록을 생성일 내림차순으로 조회합니다.

    범위를 벗어난 page/pageSize는 오류 없이 보정됩니다.

    Example:
        Response (200):
        ```json
        {
            "items": [...],
            "page": 1,
            "pageSize": 20,
            "totalItems": 25,
            "totalPages": 2
        }
        ```
    """
    result = service.list_products(page, page_size, query, category)
    return PagedResponse[ProductResponse](
        items=[ProductResponse.from_product(p) for p in result.items],
        page=result.page,
        page_size=result.page_size,
        total_items=result.total_items,
        total_pages=result.total_pages,
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    """
    상품 상세 정보를 조회합니다. product_id는 "prod_42" 또는 "42" 형식입니다.

    Raises:
        400: 식별자 형식 오류
        404: 상품 없음
    """
    return ProductResponse.from_product(service.get_product(product_id))


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
def create_product(
    product_data: ProductRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    """
    새 상품을 생성합니다.

    Raises:
        409: SKU 중복
    """
    return ProductResponse.from_product(service.create_product(product_data))


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    """
    상품의 모든 필드를 교체합니다.

    Raises:
        400: 식별자 형식 오류
        404: 상품 없음
        409: 다른 상품이 사용 중인 SKU, 또는 동시 수정 충돌
    """
    return ProductResponse.from_product(
        service.update_product(product_id, product_data)
    )


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    """상품을 영구 삭제합니다."""
    service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/products/{product_id}/inventory/decrement",
    response_model=InventoryDecrementResponse,
)
def decrement_inventory(
    product_id: str,
    decrement_data: InventoryDecrementRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    """
    재고를 차감합니다.

    재고가 부족하면 오류 대신 decremented=false를 반환하고 재고는 그대로 둡니다.

    Example:
        Request:
        ```json
        {"quantity": 2}
        ```

        Response (200):
        ```json
        {"id": "prod_1", "requested": 2, "decremented": true}
        ```
    """
    key = decode_product_id(product_id)
    decremented = service.decrement_inventory(key, decrement_data.quantity)
    return InventoryDecrementResponse(
        id=encode_product_id(key),
        requested=decrement_data.quantity,
        decremented=decremented,
    )
