import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.expire_pending_purchases_use_case import (
    ExpirePendingPurchasesUseCase,
)


class PendingPurchaseExpiryJob:
    """Periodically cancels purchases whose payment never arrived."""

    def __init__(self, *, use_case: ExpirePendingPurchasesUseCase, interval_seconds: float) -> None:
        self.use_case = use_case
        self.interval_seconds = interval_seconds

    async def run_once(self) -> int:
        expired = await self.use_case.execute()
        return len(expired)

    async def run_forever(self) -> None:
        Logger.base.info(f'⏰ [EXPIRE] Sweeping pending purchases every {self.interval_seconds}s')
        while True:
            try:
                await self.run_once()
            except Exception as e:
                # Keep sweeping; the next run retries the same purchases
                Logger.base.exception(f'❌ [EXPIRE] Sweep failed: {e}')
            await anyio.sleep(self.interval_seconds)

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self.run_forever)  # type: ignore[arg-type]
