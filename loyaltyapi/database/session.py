import logging
from typing import Iterator

from sqlalchemy.orm import Session

from loyaltyapi.database.connection import SessionLocal

logger = logging.getLogger(__name__)


def get_db() -> Iterator[Session]:
    """요청 단위 세션 - 요청 종료 시 닫힘, 처리 중 예외면 미확정 변경 롤백"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            logger.debug("Rolling back request session after an error")
            db.rollback()
        raise
    finally:
        db.close()
