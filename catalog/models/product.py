"""
Product 모델
"""

from sqlalchemy import JSON, Column, Integer, String, Text
from sqlalchemy.ext.hybrid import hybrid_property

from catalog.db.database import Base
from catalog.db.types import UTCDateTime


class Product(Base):
    """
    상품 모델

    Attributes:
        id: 상품 내부 키 (Primary Key, 외부에는 "prod_<id>"로만 노출)
        sku: 재고 관리 코드 (Unique, Not Null, 대소문자 구분)
        name: 상품명 (Not Null)
        description: 상품 설명 (Nullable)
        currency: 통화 코드 3자리 (Not Null)
        amount: 가격 (최소 통화 단위, 0 이상)
        quantity: 현재 재고 수량 (0 이상)
        in_stock: quantity > 0 에서 계산되는 값 (컬럼 아님)
        category: 분류 (Nullable, 정확히 일치하는 값으로 필터링)
        tags: 라벨 목록 (입력 순서 유지, 중복 허용)
        version: 낙관적 락 버전 (수정 시마다 자동 증가)
        created_at: 생성 일시 (서비스에서 설정)
        updated_at: 수정 일시 (서비스에서 변경 시마다 갱신)
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    sku = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    currency = Column(String(3), nullable=False)
    amount = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    updated_at = Column(UTCDateTime, nullable=False)

    # SQLite에서도 삭제된 키가 재사용되지 않도록 AUTOINCREMENT 사용
    __table_args__ = {"sqlite_autoincrement": True}
    __mapper_args__ = {"version_id_col": version}

    @hybrid_property
    def in_stock(self) -> bool:
        """재고 보유 여부 (항상 quantity에서 계산)"""
        return self.quantity > 0

    def __repr__(self) -> str:
        """Product 객체의 문자열 표현"""
        return f"<Product(id={self.id}, sku='{self.sku}', quantity={self.quantity})>"

    def __str__(self) -> str:
        return f"Product: {self.name} ({self.sku})"
