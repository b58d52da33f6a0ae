"""
정산 워커

주기적으로(기본 5초) 처리 대기 주문(NEW/PROCESSING)을 조회해 정산 시스템에 상태를 묻고,
주문 상태를 갱신하며, PROCESSED 로 확정된 주문의 적립금을 사용자 잔액에 반영합니다.

- 주문은 한 번에 하나씩, 오래된 업로드 순으로 조회 (정산 시스템 부하 제한)
- 주문 사이에 짧은 간격(기본 100ms)
- 429 응답 시 Retry-After 동안 워커 전체 일시 정지
- 개별 주문/틱 실패는 로그만 남기고 계속 진행 (다음 틱에서 자동 재시도)
- PROCESSED 상태 기록과 적립은 한 트랜잭션 - 적립이 실패하면 주문은 대기 상태로 남음
- 저장소 호출은 스레드 풀에서 실행 (이벤트 루프를 막지 않음)
- 중지 이벤트는 모든 대기 지점에서 즉시 반영
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from loyaltyapi.core.exceptions import (
    AccrualRateLimitError,
    UnknownAccrualStatusError,
)
from loyaltyapi.models.order import OrderStatus
from loyaltyapi.providers.accrual.client import AccrualClient
from loyaltyapi.schemas.common import to_points
from loyaltyapi.schemas.order import Order
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.order_service import OrderService

logger = logging.getLogger(__name__)


# 정산 시스템 상태 -> 내부 주문 상태
ACCRUAL_STATUS_MAP: Dict[str, OrderStatus] = {
    "REGISTERED": OrderStatus.NEW,
    "PROCESSING": OrderStatus.PROCESSING,
    "INVALID": OrderStatus.INVALID,
    "PROCESSED": OrderStatus.PROCESSED,
}

PENDING_STATUSES = frozenset(s.value for s in OrderStatus.pending())


class AccrualWorker:
    """정산 시스템 폴링 워커"""

    def __init__(
        self,
        client: AccrualClient,
        order_service: OrderService,
        balance_service: BalanceService,
        poll_interval: float = 5.0,
        order_pause: float = 0.1,
        passthrough_unknown_status: bool = False,
    ):
        self.client = client
        self.order_service = order_service
        self.balance_service = balance_service
        self.poll_interval = poll_interval
        self.order_pause = order_pause
        self.passthrough_unknown_status = passthrough_unknown_status

    async def run(self, stop_event: asyncio.Event) -> None:
        """중지 이벤트가 설정될 때까지 폴링 반복"""
        logger.info("Accrual worker started")
        while not stop_event.is_set():
            try:
                await self.process_pending(stop_event)
            except Exception:
                logger.exception("Failed to process pending orders")

            if await self._pause(stop_event, self.poll_interval):
                break
        logger.info("Accrual worker stopped")

    async def process_pending(self, stop_event: asyncio.Event) -> int:
        """처리 대기 주문 한 바퀴 처리

        Returns:
            int: 상태가 변경된 주문 수
        """
        orders: List[Order] = await run_in_threadpool(self.order_service.list_pending)
        if not orders:
            return 0

        logger.debug(f"Polling accrual system for {len(orders)} pending orders")
        updated = 0
        for index, order in enumerate(orders):
            if stop_event.is_set():
                break

            try:
                if await self.process_order(order):
                    updated += 1
            except AccrualRateLimitError as e:
                logger.warning(
                    f"Rate limited by accrual system, pausing worker for {e.retry_after}s"
                )
                if await self._pause(stop_event, e.retry_after):
                    break
            except UnknownAccrualStatusError as e:
                logger.warning(
                    f"Unknown status {e.status!r} for order {order.number}, leaving it pending"
                )
            except Exception as e:
                logger.error(f"Failed to process order {order.number}: {str(e)}")

            if index < len(orders) - 1 and await self._pause(stop_event, self.order_pause):
                break

        return updated

    async def process_order(self, order: Order) -> bool:
        """주문 하나의 정산 상태를 조회하고 반영

        Returns:
            bool: 주문 상태가 변경되었는지 여부
        """
        result = await self.client.get_order_accrual(order.number)
        if result is None:
            logger.debug(f"Order {order.number} is not registered in accrual system yet")
            return False

        status = self._map_status(result.status)
        if status == order.status:
            return False

        accrual = to_points(result.accrual) if result.accrual is not None else None
        changed = await run_in_threadpool(self._settle, order, status, accrual)
        if not changed:
            # 다른 워커가 먼저 상태를 확정한 경우 - 적립하지 않음
            logger.warning(f"Order {order.number} was settled concurrently, skipping")
            return False

        logger.info(f"Order {order.number}: {order.status} -> {status}")
        return True

    def _settle(self, order: Order, status: str, accrual: Optional[Decimal]) -> bool:
        """상태 변경과 적립을 함께 확정 (스레드 풀에서 실행)

        적립 대상이면 상태 변경을 보류한 채 적립하고 둘을 한 번에 commit 합니다.
        적립이나 commit 이 실패하면 상태 변경도 롤백되어 다음 틱에서 재시도됩니다.
        """
        credit = (
            status == OrderStatus.PROCESSED.value
            and accrual is not None
            and accrual > 0
        )
        changed = self.order_service.advance_status(
            order.id, status, accrual, only_from=PENDING_STATUSES, commit=not credit
        )
        if not credit:
            return changed
        if not changed:
            self.order_service.rollback()
            return False

        try:
            self.balance_service.credit(order.user_id, accrual, commit=False)
            self.order_service.commit()
        except Exception:
            self.order_service.rollback()
            raise

        logger.info(
            f"Accrual {accrual} added to user {order.user_id} for order {order.number}"
        )
        return True

    def _map_status(self, accrual_status: str) -> str:
        mapped = ACCRUAL_STATUS_MAP.get(accrual_status)
        if mapped is not None:
            return mapped.value
        if self.passthrough_unknown_status:
            logger.warning(f"Unknown status from accrual system: {accrual_status!r}")
            return accrual_status
        raise UnknownAccrualStatusError(accrual_status)

    @staticmethod
    async def _pause(stop_event: asyncio.Event, seconds: float) -> bool:
        """seconds 동안 대기, 중지 이벤트가 먼저 설정되면 True"""
        if seconds <= 0:
            return stop_event.is_set()
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


class AccrualWorkerHandle:
    """워커 태스크 핸들 - 중지 이벤트와 완료 대기를 함께 관리"""

    def __init__(self, worker: AccrualWorker):
        self.worker = worker
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self.worker.run(self._stop_event), name="accrual-worker"
        )

    async def stop(self, timeout: float = 15.0) -> None:
        """중지 요청 후 종료 대기, timeout 안에 끝나지 않으면 태스크 취소"""
        if self._task is None or self._stop_event is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Accrual worker did not stop within {timeout}s, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            self._stop_event = None
