"""
포인트 잔액 데이터 모델

사용자별 사용 가능 포인트(current)와 누적 인출 포인트(withdrawn)를 한 행으로 관리합니다.
잔액 변경은 모두 단일 원자적 SQL 문(upsert / 조건부 update)으로만 수행됩니다.
"""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import CheckConstraint

from loyaltyapi.models.base import BaseModel


class Balance(BaseModel):
    """
    사용자 잔액 테이블

    불변식:
    1. current >= 0 (조건부 차감으로 보장, CHECK 제약은 최후 방어선)
    2. withdrawn 은 단조 증가
    3. 행은 최초 적립 시 생성되며, 행이 없는 사용자는 0/0 으로 조회됨
    """

    __tablename__ = "balances"
    __table_args__ = (
        CheckConstraint("current >= 0", name="ck_balances_current_non_negative"),
        CheckConstraint("withdrawn >= 0", name="ck_balances_withdrawn_non_negative"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    current: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    withdrawn: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
