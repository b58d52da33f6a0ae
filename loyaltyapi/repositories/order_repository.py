"""
주문 리포지토리

- 주문 번호는 전역 유일 (uq_orders_number 제약이 최종 판단 기준)
- 상태 변경은 단일 UPDATE 문으로 수행, 필요 시 현재 상태 조건을 함께 건다
- commit=False 로 쓴 상태 변경은 같은 세션의 잔액 적립과 함께 commit()/rollback() 된다
"""

from decimal import Decimal
from typing import Collection, List, Optional

from sqlalchemy import asc, desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from loyaltyapi.core.exceptions import OrderNumberTakenError
from loyaltyapi.models.order import Order as OrderModel, OrderStatus
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.order import Order


class OrderRepository(BaseRepository[OrderModel, Order]):
    def __init__(self, db: Session):
        super().__init__(OrderModel, Order, db)

    def create_order(self, number: str, user_id: int, status: str) -> Order:
        try:
            return self.create(number=number, user_id=user_id, status=status)
        except IntegrityError as e:
            # 동시 업로드로 인한 번호 중복 - 다른 제약 위반은 그대로 전파
            if "number" in str(e.orig):
                raise OrderNumberTakenError(number) from e
            raise

    def get_by_number(self, number: str) -> Optional[Order]:
        instance = self.db.scalars(
            select(self.model_class)
            .where(self.model_class.number == number)
            .execution_options(populate_existing=True)
        ).first()
        return self._to_schema(instance)

    def list_by_user(self, user_id: int) -> List[Order]:
        instances = self.db.scalars(
            select(self.model_class)
            .where(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.uploaded_at), desc(self.model_class.id))
            .execution_options(populate_existing=True)
        ).all()
        return self._to_schemas(instances)

    def list_pending(self) -> List[Order]:
        pending = [s.value for s in OrderStatus.pending()]
        instances = self.db.scalars(
            select(self.model_class)
            .where(self.model_class.status.in_(pending))
            .order_by(asc(self.model_class.uploaded_at), asc(self.model_class.id))
            .execution_options(populate_existing=True)
        ).all()
        return self._to_schemas(instances)

    def update_status(
        self,
        order_id: int,
        status: str,
        accrual: Optional[Decimal],
        only_from: Optional[Collection[str]] = None,
        commit: bool = True,
    ) -> bool:
        stmt = update(self.model_class).where(self.model_class.id == order_id)
        if only_from is not None:
            stmt = stmt.where(self.model_class.status.in_(list(only_from)))
        stmt = stmt.values(status=status, accrual=accrual)

        try:
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result.rowcount > 0
