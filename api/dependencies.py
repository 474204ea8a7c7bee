import logging

from application.service_factory import ServiceFactory
from application.services import (
	ConversionService,
	CurrencyService,
	RateAggregator,
	RateResolver,
	RefreshScheduler,
)
from config.settings import get_settings
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	factory: ServiceFactory | None = None


deps = AppDependencies()


async def init_dependencies() -> ServiceFactory:
	"""Build every service. Called at app startup."""
	logger.info('Initializing dependencies...')
	deps.factory = await ServiceFactory(get_settings()).create()
	logger.info('Dependencies initialized')
	return deps.factory


async def cleanup_dependencies() -> None:
	if deps.factory is not None:
		await deps.factory.cleanup()
		deps.factory = None


def _factory() -> ServiceFactory:
	if deps.factory is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')
	return deps.factory


def get_database() -> Database:
	return _factory().db


def get_rate_cache() -> RateCache:
	return _factory().cache


def get_currency_service() -> CurrencyService:
	return _factory().currency_service


def get_rate_aggregator() -> RateAggregator:
	return _factory().aggregator


def get_rate_resolver() -> RateResolver:
	return _factory().resolver


def get_conversion_service() -> ConversionService:
	return _factory().conversion_service


def get_refresh_scheduler() -> RefreshScheduler:
	return _factory().scheduler
