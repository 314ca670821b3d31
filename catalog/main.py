from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.errors import register_exception_handlers
from catalog.api.routes import products
from catalog.core.config import get_settings
from catalog.core.logging import configure_logging
from catalog.db.database import init_db

configure_logging(get_settings())


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Product Catalog API",
    description="SKU 유일성, 페이지네이션 검색, 재고 차감을 지원하는 상품 카탈로그",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# 라우터 등록
app.include_router(products.router, prefix="/api", tags=["products"])


@app.get("/health")
async def health_check():
    """헬스체크 엔드포인트 (Docker 헬스체크용)"""
    return {"status": "ok"}
