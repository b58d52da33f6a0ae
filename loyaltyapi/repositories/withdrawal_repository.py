from decimal import Decimal
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from loyaltyapi.models.withdrawal import Withdrawal as WithdrawalModel
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.withdrawal import Withdrawal


class WithdrawalRepository(BaseRepository[WithdrawalModel, Withdrawal]):
    """인출 내역 리포지토리 (추가 전용)"""

    def __init__(self, db: Session):
        super().__init__(WithdrawalModel, Withdrawal, db)

    def create_withdrawal(
        self, user_id: int, order_number: str, sum: Decimal, commit: bool = True
    ) -> Withdrawal:
        return self.create(
            commit=commit, user_id=user_id, order_number=order_number, sum=sum
        )

    def list_by_user(self, user_id: int) -> List[Withdrawal]:
        instances = self.db.scalars(
            select(self.model_class)
            .where(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.processed_at), desc(self.model_class.id))
            .execution_options(populate_existing=True)
        ).all()
        return self._to_schemas(instances)
