from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from loyaltyapi.models.base import BaseModel


class OrderStatus(str, Enum):
    """주문 적립 처리 상태"""

    NEW = "NEW"  # 업로드됨, 아직 정산 시스템 결과 없음
    PROCESSING = "PROCESSING"  # 정산 시스템에서 계산 중
    INVALID = "INVALID"  # 적립 거절 (최종)
    PROCESSED = "PROCESSED"  # 적립 완료 (최종)

    @classmethod
    def pending(cls) -> tuple["OrderStatus", ...]:
        return (cls.NEW, cls.PROCESSING)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(BaseModel):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("number", name="uq_orders_number"),
        Index("idx_orders_user_uploaded", "user_id", "uploaded_at"),
        Index("idx_orders_status_uploaded", "status", "uploaded_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    number: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # 알 수 없는 정산 상태를 그대로 저장할 수 있도록 Enum 대신 문자열 사용
    status: Mapped[str] = mapped_column(
        String(32), default=OrderStatus.NEW.value, nullable=False
    )
    accrual: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self):
        return f"<Order(id={self.id}, number={self.number}, status={self.status})>"
