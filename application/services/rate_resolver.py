import logging
from datetime import UTC, datetime, timedelta

from application.services.currency_service import CurrencyService
from application.services.rate_aggregator import RateAggregator
from domain.models.currency import Rate, validate_currency_pair
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.repositories.rate import RateStore

logger = logging.getLogger(__name__)


class RateResolver:
    """Resolves a pair through cache, then a fresh stored rate, then the providers."""

    def __init__(
        self,
        cache: RateCache,
        store: RateStore,
        aggregator: RateAggregator,
        currency_service: CurrencyService,
        freshness_window: timedelta = timedelta(hours=1),
        clock=None,
    ):
        self.cache = cache
        self.store = store
        self.aggregator = aggregator
        self.currency_service = currency_service
        self.freshness_window = freshness_window
        self._clock = clock or (lambda: datetime.now(UTC))

    async def resolve(self, base: str, target: str) -> Rate:
        base, target = validate_currency_pair(base, target)
        await self.currency_service.ensure_known(base, target)

        cached = await self.cache.get(base, target)
        if cached is not None:
            return cached

        stored = await self.store.find_latest(base, target)
        if stored is not None and self._is_fresh(stored):
            logger.debug(f"Serving stored rate {base} -> {target} from {stored.provider_name}")
            await self.cache.set(base, target, stored)
            return stored

        return await self._aggregate_and_cache(base, target)

    async def fetch_fresh(self, base: str, target: str) -> Rate:
        base, target = validate_currency_pair(base, target)
        await self.currency_service.ensure_known(base, target)
        return await self._aggregate_and_cache(base, target)

    async def invalidate(self, base: str, target: str) -> None:
        base, target = validate_currency_pair(base, target)
        await self.cache.invalidate(base, target)

    def _is_fresh(self, rate: Rate) -> bool:
        return rate.observed_at >= self._clock() - self.freshness_window

    async def _aggregate_and_cache(self, base: str, target: str) -> Rate:
        rate = await self.aggregator.fetch_and_aggregate(base, target)
        await self.cache.set(base, target, rate)
        return rate
