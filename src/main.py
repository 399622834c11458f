"""
Production FastAPI Application

Purchasing API plus the background sweep that expires unpaid purchases.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.expire_pending_purchases_use_case import (
    ExpirePendingPurchasesUseCase,
)
from src.service.purchasing.driving_adapter.scheduler.pending_purchase_expiry_job import (
    PendingPurchaseExpiryJob,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Purchasing] Starting up...')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    setup()
    Logger.base.info('🔌 [Purchasing] Dependency injection wired')

    database = container.database()
    await database.create_tables()
    Logger.base.info('🗄️  [Purchasing] Database ready')

    async with anyio.create_task_group() as tg:
        if settings.PURCHASE_EXPIRY_SWEEP_INTERVAL_SECONDS > 0:
            expiry_job = PendingPurchaseExpiryJob(
                use_case=ExpirePendingPurchasesUseCase(
                    uow_factory=container.uow_factory,
                    pending_ttl=timedelta(minutes=settings.PURCHASE_PENDING_TTL_MINUTES),
                ),
                interval_seconds=settings.PURCHASE_EXPIRY_SWEEP_INTERVAL_SECONDS,
            )
            await expiry_job.start(task_group=tg)

        Logger.base.info('✅ [Purchasing] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Purchasing] Shutting down...')
        tg.cancel_scope.cancel()

    await database.dispose()
    Logger.base.info('🗄️  [Purchasing] Database engine disposed')

    cleanup()
    container.unwire()
    Logger.base.info('👋 [Purchasing] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
