from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BaseModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Withdrawal(BaseModel):
    """포인트 인출 내역 (추가 전용, 수정/삭제 없음)"""

    __tablename__ = "withdrawals"
    __table_args__ = (Index("idx_withdrawals_user_processed", "user_id", "processed_at"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # 참조용 주문 번호 - orders 테이블과 외래키 관계 없음
    order_number: Mapped[str] = mapped_column(String(64), nullable=False)
    sum: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
