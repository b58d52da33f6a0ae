from datetime import datetime

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# 인덱스/제약 이름 규칙 (명시적으로 이름을 준 제약은 그대로 사용)
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


class TimestampMixin:
    """행 생성/수정 시각 (DB 서버 시각 기준)"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class BaseModel(Base, TimestampMixin):
    """모든 테이블 모델의 베이스 클래스"""

    __abstract__ = True

    def __repr__(self) -> str:
        pk = ", ".join(
            f"{column.name}={getattr(self, column.name)!r}"
            for column in self.__table__.primary_key.columns
        )
        return f"<{type(self).__name__}({pk})>"
