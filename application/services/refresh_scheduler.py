import asyncio
import logging
from collections.abc import Iterable

from application.services.currency_service import CurrencyService
from application.services.rate_aggregator import RateAggregator
from domain.exceptions.currency import InvalidInputError, RefreshError
from domain.models.currency import normalize_currency_code
from infrastructure.cache.redis_cache import RateCache

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Periodically refreshes every pair of supported currencies.

    Sweeps never overlap: a timer tick that finds a sweep still running is
    skipped, while a manual trigger waits for it.
    """

    def __init__(
        self,
        aggregator: RateAggregator,
        cache: RateCache,
        currency_service: CurrencyService,
        interval: float = 3600.0,
        initial_delay: float = 10.0,
    ):
        self.aggregator = aggregator
        self.cache = cache
        self.currency_service = currency_service
        self.interval = interval
        self.initial_delay = initial_delay
        self._lock = asyncio.Lock()
        self._sweep_task: asyncio.Task | None = None
        self._stopped = asyncio.Event()

    @property
    def is_refreshing(self) -> bool:
        return self._lock.locked()

    async def refresh_all(self, codes: Iterable[str]) -> int:
        currencies = self._normalize(codes)
        if len(currencies) < 2:
            logger.warning(f"Need at least two currencies to refresh, got {currencies}")
            return 0

        refreshed = 0
        for base in currencies:
            targets = [code for code in currencies if code != base]
            try:
                rates = await self.aggregator.fetch_and_aggregate_multiple(base, targets)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Refresh of base {base} failed: {e}")
                continue

            for target, rate in rates.items():
                await self.cache.set(base, target, rate)
            refreshed += len(rates)

        logger.info(f"Refreshed {refreshed} of {len(currencies) * (len(currencies) - 1)} pairs")
        return refreshed

    async def run_scheduled_refresh(self) -> int | None:
        if self._lock.locked():
            logger.warning("Previous refresh still running, skipping this one")
            return None

        async with self._lock:
            try:
                return await self._sweep()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Scheduled refresh failed: {e}")
                return None

    async def trigger_manual_refresh(self) -> int:
        async with self._lock:
            try:
                return await self._sweep()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Manual refresh failed: {e}")
                raise RefreshError(f"Manual refresh failed: {e}") from e

    async def run(self) -> None:
        logger.info(
            f"Rate refresh loop starting (initial delay {self.initial_delay}s, "
            f"interval {self.interval}s)"
        )
        self._stopped.clear()
        if await self._wait(self.initial_delay):
            return

        while not self._stopped.is_set():
            if self._sweep_task is not None and not self._sweep_task.done():
                logger.warning("Refresh tick skipped, previous sweep still running")
            else:
                self._sweep_task = asyncio.create_task(self.run_scheduled_refresh())

            if await self._wait(self.interval):
                return

    async def stop(self) -> None:
        self._stopped.set()
        task = self._sweep_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Rate refresh loop stopped")

    async def _sweep(self) -> int:
        codes = await self.currency_service.get_supported_currencies()
        return await self.refresh_all(codes)

    async def _wait(self, seconds: float) -> bool:
        """Sleep for `seconds`; True when stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=seconds)
        except TimeoutError:
            return False
        return True

    @staticmethod
    def _normalize(codes: Iterable[str]) -> list[str]:
        currencies: list[str] = []
        for code in codes or []:
            try:
                normalized = normalize_currency_code(code)
            except InvalidInputError as e:
                logger.warning(f"Ignoring currency {code!r}: {e}")
                continue
            if normalized not in currencies:
                currencies.append(normalized)
        return currencies
