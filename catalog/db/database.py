"""
SQLAlchemy 데이터베이스 설정

SQLAlchemy 엔진, 세션, Base 클래스를 정의합니다.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from catalog.core.config import get_settings

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """
    데이터베이스 URL에 맞는 엔진을 생성합니다.

    SQLite는 여러 스레드에서 같은 연결을 쓸 수 있도록 check_same_thread를 끄고,
    다른 DB는 connection pool 설정을 사용합니다.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=40,
        pool_timeout=30,  # connection 대기 timeout (저장소 호출 상한)
        pool_pre_ping=True,  # connection 유효성 자동 체크
        pool_recycle=3600,
    )


engine = build_engine(get_settings().database_url)

# 커밋 후에도 응답 직렬화에 객체를 그대로 사용 (읽기마다 재조회하지 않음)
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


def init_db(bind: Engine = engine) -> None:
    """모든 테이블을 생성합니다 (없는 경우에만)."""
    # 모델이 Base.metadata에 등록되도록 import
    import catalog.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    """
    FastAPI 의존성 주입용 데이터베이스 세션 제너레이터

    사용 예:
        @app.get("/items/")
        def read_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
