"""
잔액 리포지토리 - 원자적 적립/차감

모든 잔액 변경은 애플리케이션에서 읽고-계산-쓰기 하지 않고,
데이터베이스의 단일 문장으로 수행됩니다:

- 적립: INSERT .. ON CONFLICT (user_id) DO UPDATE SET current = current + :amount
- 차감: UPDATE .. SET current = current - :a, withdrawn = withdrawn + :a
        WHERE user_id = :u AND current >= :a
  영향받은 행 수가 0이면 잔액 부족
"""

from decimal import Decimal

from sqlalchemy import func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from loyaltyapi.models.balance import Balance as BalanceModel
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.balance import BalanceResponse


class BalanceRepository(BaseRepository[BalanceModel, BalanceResponse]):
    def __init__(self, db: Session):
        super().__init__(BalanceModel, BalanceResponse, db)

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(self.model_class)
        if dialect == "sqlite":
            return sqlite.insert(self.model_class)
        raise NotImplementedError(f"Atomic upsert is not supported for {dialect}")

    def get_balance(self, user_id: int) -> BalanceResponse:
        """잔액 행이 없으면 0/0"""
        instance = self.db.get(self.model_class, user_id, populate_existing=True)
        if instance is None:
            return BalanceResponse(current=Decimal("0"), withdrawn=Decimal("0"))
        return self._to_schema(instance)

    def credit(self, user_id: int, amount: Decimal, commit: bool = True) -> None:
        stmt = self._insert().values(
            user_id=user_id, current=amount, withdrawn=Decimal("0")
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.model_class.user_id],
            set_={
                "current": self.model_class.current + stmt.excluded.current,
                "updated_at": func.now(),
            },
        )
        try:
            self.db.execute(stmt)
        except Exception:
            self.db.rollback()
            raise
        self._commit(commit)

    def debit(self, user_id: int, amount: Decimal, commit: bool = True) -> bool:
        stmt = (
            update(self.model_class)
            .where(
                self.model_class.user_id == user_id,
                self.model_class.current >= amount,
            )
            .values(
                current=self.model_class.current - amount,
                withdrawn=self.model_class.withdrawn + amount,
            )
        )
        try:
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
        except Exception:
            self.db.rollback()
            raise
        if result.rowcount == 0:
            return False
        self._commit(commit)
        return True
