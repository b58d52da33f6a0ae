from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from loyaltyapi.config import settings
from loyaltyapi.models import Base


def _engine_kwargs() -> dict:
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,  # 연결 유효성 검사
        "pool_recycle": 3600,  # 1시간마다 연결 재생성
    }


engine = create_engine(
    settings.DATABASE_URI,
    echo=settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG",
    **_engine_kwargs(),
)

# Use expire_on_commit=False to avoid DetachedInstanceError when accessing
# attributes after commit within the same request scope (common FastAPI pattern).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def init_db(bind=None) -> None:
    """테이블 생성 (이미 있으면 건너뜀)

    데이터베이스에 연결하지 못하면 예외를 그대로 전파합니다.
    """
    Base.metadata.create_all(bind=bind or engine)
