# composition_service/adapters/outbound/calculator/calculation_dispatcher.py

"""
Background notification of the external calculator.

Each completed composition becomes one supervised asyncio task that POSTs
{"composition_id": id} to CALCULATOR_URL, retrying CALCULATOR_MAX_RETRIES
times. Jobs that still fail are written to the dead-letter logger; nothing
is raised back to the request that scheduled them.
"""

import asyncio
import logging
from typing import Optional, Set

import httpx

from composition_service.adapters.configuration.config import Settings
from composition_service.application.ports.outbound.calculation_port import ICalculationDispatcher

logger = logging.getLogger(__name__)
dead_letter_logger = logging.getLogger("composition_service.dead_letter")


class CalculationDispatcher(ICalculationDispatcher):

    def __init__(
            self,
            url: str,
            timeout: float = 10.0,
            max_retries: int = 0,
            retry_delay: float = 1.0,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self.transport = transport
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        return cls(
            url=settings.CALCULATOR_URL,
            timeout=settings.CALCULATOR_TIMEOUT_SECONDS,
            max_retries=settings.CALCULATOR_MAX_RETRIES,
            retry_delay=settings.CALCULATOR_RETRY_DELAY_SECONDS,
            transport=transport,
        )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, composition_id: int) -> asyncio.Task:
        """Schedule the notification and return immediately."""
        task = asyncio.create_task(self.run(composition_id), name=f"calculation-{composition_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(f"Calculation request scheduled for composition {composition_id}")
        return task

    async def run(self, composition_id: int) -> bool:
        """
        Deliver one job with retries.

        Returns:
            True when the calculator accepted the request
        """
        attempts = self.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                await self._send(composition_id)
                logger.info(f"Calculator accepted composition {composition_id} (attempt {attempt}/{attempts})")
                return True
            except httpx.HTTPError as e:
                last_error = e
                logger.warning(
                    f"Calculator request for composition {composition_id} failed "
                    f"(attempt {attempt}/{attempts}): {e}"
                )
            except Exception as e:
                last_error = e
                logger.exception(f"Unexpected error notifying calculator for composition {composition_id}")
                break

            if attempt < attempts:
                await asyncio.sleep(self.retry_delay * attempt)

        dead_letter_logger.error(
            f"Calculation job dropped: composition_id={composition_id} url={self.url} "
            f"attempts={attempts} error={last_error!r}"
        )
        return False

    async def _send(self, composition_id: int) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.url, json={"composition_id": composition_id})
            response.raise_for_status()

    async def drain(self) -> None:
        """Wait for every scheduled job to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel pending jobs at process stop."""
        tasks = list(self._tasks)
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} pending calculation job(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        for task in tasks:
            if task.cancelled():
                dead_letter_logger.error(f"Calculation job cancelled at shutdown: {task.get_name()}")
