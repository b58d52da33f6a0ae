from dependency_injector import containers, providers

from loyaltyapi.config import get_settings
from loyaltyapi.database.connection import SessionLocal
from loyaltyapi.providers.accrual.client import AccrualClient
from loyaltyapi.repositories.balance_repository import BalanceRepository
from loyaltyapi.repositories.order_repository import OrderRepository
from loyaltyapi.services.accrual_worker import AccrualWorker, AccrualWorkerHandle
from loyaltyapi.services.balance_service import BalanceService
from loyaltyapi.services.order_service import OrderService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class WorkerModule(containers.DeclarativeContainer):
    """Accrual worker dependencies.

    The worker owns one long-lived session; request handlers use per-request
    sessions from ``deps.py``.
    """

    config = providers.DependenciesContainer()

    session = providers.Singleton(SessionLocal)

    accrual_client = providers.Singleton(
        AccrualClient,
        base_url=config.config.provided.ACCRUAL_SYSTEM_ADDRESS,
        timeout=config.config.provided.ACCRUAL_REQUEST_TIMEOUT_SEC,
        rate_limit_default=config.config.provided.ACCRUAL_RATE_LIMIT_DEFAULT_SEC,
    )

    order_service = providers.Factory(
        OrderService, order_store=providers.Factory(OrderRepository, db=session)
    )
    balance_service = providers.Factory(
        BalanceService, ledger=providers.Factory(BalanceRepository, db=session)
    )

    accrual_worker = providers.Factory(
        AccrualWorker,
        client=accrual_client,
        order_service=order_service,
        balance_service=balance_service,
        poll_interval=config.config.provided.ACCRUAL_POLL_INTERVAL_SEC,
        order_pause=config.config.provided.ACCRUAL_ORDER_PAUSE_SEC,
        passthrough_unknown_status=config.config.provided.ACCRUAL_PASSTHROUGH_UNKNOWN_STATUS,
    )

    worker_handle = providers.Singleton(AccrualWorkerHandle, worker=accrual_worker)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    worker = providers.Container(WorkerModule, config=config)
