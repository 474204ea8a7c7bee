from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_database, get_rate_aggregator, get_rate_cache, get_refresh_scheduler
from api.schemas import HealthResponse
from application.services import RateAggregator, RefreshScheduler
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.database import Database

router = APIRouter(tags=['health'])


@router.get('/health', response_model=HealthResponse)
async def health_check(
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
	cache: Annotated[RateCache, Depends(get_rate_cache)],
	database: Annotated[Database, Depends(get_database)],
	scheduler: Annotated[RefreshScheduler, Depends(get_refresh_scheduler)],
) -> HealthResponse:
	cache_ok = await cache.ping()
	database_ok = await database.ping()
	providers = aggregator.provider_names()

	healthy = database_ok and bool(providers)
	return HealthResponse(
		status='healthy' if healthy and cache_ok else 'degraded' if healthy else 'unhealthy',
		providers=providers,
		cache=cache_ok,
		database=database_ok,
		refreshing=scheduler.is_refreshing,
	)
