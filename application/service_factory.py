import logging
import random
from datetime import UTC, datetime, timedelta

from redis.asyncio import Redis

from application.services import (
    ConversionService,
    CurrencyService,
    RateAggregator,
    RateResolver,
    RefreshScheduler,
)
from config.settings import Settings
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import CurrencyRepository
from infrastructure.persistence.repositories.rate import RateStore
from infrastructure.providers import (
    CurrencyAPIProvider,
    FixerIOProvider,
    MockRateProvider,
    OpenExchangeProvider,
    ProviderRegistry,
    RetryPolicy,
)

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Builds and wires every service from settings, and tears them down."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db: Database | None = None
        self.redis_client: Redis | None = None
        self.cache: RateCache | None = None
        self.store: RateStore | None = None
        self.registry: ProviderRegistry | None = None
        self.currency_service: CurrencyService | None = None
        self.aggregator: RateAggregator | None = None
        self.resolver: RateResolver | None = None
        self.conversion_service: ConversionService | None = None
        self.scheduler: RefreshScheduler | None = None

    async def create(self) -> 'ServiceFactory':
        settings = self.settings

        self.db = Database(settings.DATABASE_URL)
        await self.db.create_tables()

        self.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        self.cache = RateCache(self.redis_client, rate_ttl=timedelta(seconds=settings.CACHE_TTL_SECONDS))
        self.store = RateStore(self.db)

        self.registry = self.build_registry(settings)
        if not len(self.registry):
            logger.warning('No rate providers configured; every lookup will fail')

        self.currency_service = CurrencyService(CurrencyRepository(self.db))
        await self.currency_service.initialize_supported_currencies(settings.supported_currency_codes)

        self.aggregator = RateAggregator(
            registry=self.registry,
            store=self.store,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            max_concurrency=settings.PROVIDER_MAX_CONCURRENCY,
        )
        self.resolver = RateResolver(
            cache=self.cache,
            store=self.store,
            aggregator=self.aggregator,
            currency_service=self.currency_service,
            freshness_window=timedelta(seconds=settings.FRESHNESS_WINDOW_SECONDS),
        )
        self.conversion_service = ConversionService(self.resolver)
        self.scheduler = RefreshScheduler(
            aggregator=self.aggregator,
            cache=self.cache,
            currency_service=self.currency_service,
            interval=settings.REFRESH_INTERVAL_SECONDS,
            initial_delay=settings.REFRESH_INITIAL_DELAY_SECONDS,
        )

        logger.info(f'Services created with {len(self.registry)} providers: {self.registry.names()}')
        return self

    @staticmethod
    def build_registry(settings: Settings) -> ProviderRegistry:
        registry = ProviderRegistry(
            default_retry_policy=RetryPolicy(
                max_attempts=settings.RETRY_MAX_ATTEMPTS,
                base_delay=settings.RETRY_BASE_DELAY_SECONDS,
                multiplier=settings.RETRY_MULTIPLIER,
                max_delay=settings.RETRY_MAX_DELAY_SECONDS,
            )
        )
        timeout = settings.PROVIDER_TIMEOUT_SECONDS

        if settings.FIXERIO_API_KEY:
            registry.register(FixerIOProvider(settings.FIXERIO_API_KEY, timeout=timeout))
        if settings.OPENEXCHANGE_APP_ID:
            registry.register(OpenExchangeProvider(settings.OPENEXCHANGE_APP_ID, timeout=timeout))
        if settings.CURRENCYAPI_API_KEY:
            registry.register(CurrencyAPIProvider(settings.CURRENCYAPI_API_KEY, timeout=timeout))

        if settings.MOCK_PROVIDERS_ENABLED:
            seed = settings.MOCK_PROVIDER_SEED
            registry.register(MockRateProvider('mock-primary', priority=50, rng=random.Random(seed)))
            registry.register(MockRateProvider('mock-secondary', priority=40, rng=random.Random(seed + 1)))

        return registry

    async def cleanup(self) -> None:
        logger.info('Cleaning up services...')
        if self.scheduler:
            await self.scheduler.stop()
        if self.registry:
            await self.registry.close()
        if self.redis_client:
            await self.redis_client.aclose()
        if self.db:
            await self.db.close()
        logger.info('Cleanup complete')

    async def prune_rate_history(self) -> int:
        if self.store is None or self.settings.RATE_RETENTION_DAYS <= 0:
            return 0
        cutoff = datetime.now(UTC) - timedelta(days=self.settings.RATE_RETENTION_DAYS)
        return await self.store.delete_older_than(cutoff)
