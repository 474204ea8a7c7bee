from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import (
	get_rate_aggregator,
	get_rate_cache,
	get_rate_resolver,
	get_refresh_scheduler,
)
from api.schemas import (
	CacheInvalidationResponse,
	ExchangeRateResponse,
	ProviderRatesResponse,
	RefreshResponse,
)
from application.services import RateAggregator, RateResolver, RefreshScheduler
from domain.models.currency import validate_currency_pair
from infrastructure.cache.redis_cache import RateCache

router = APIRouter(prefix='/api', tags=['rates'])


@router.get(
	'/rate/{from_currency}/{to_currency}/providers',
	response_model=ProviderRatesResponse,
	summary='Rates from every supporting provider',
)
async def get_provider_rates(
	from_currency: str,
	to_currency: str,
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
) -> ProviderRatesResponse:
	base, target = validate_currency_pair(from_currency, to_currency)
	rates = await aggregator.fetch_from_all_providers(base, target)
	return ProviderRatesResponse(
		from_currency=base,
		to_currency=target,
		rates=[ExchangeRateResponse.from_rate(rate) for rate in rates],
	)


@router.post(
	'/rates/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_200_OK,
	summary='Refresh every supported pair now',
)
async def refresh_rates(
	scheduler: Annotated[RefreshScheduler, Depends(get_refresh_scheduler)],
) -> RefreshResponse:
	refreshed = await scheduler.trigger_manual_refresh()
	return RefreshResponse(refreshed=refreshed)


@router.delete(
	'/rates/cache',
	response_model=CacheInvalidationResponse,
	summary='Drop every cached rate',
)
async def clear_rate_cache(
	cache: Annotated[RateCache, Depends(get_rate_cache)],
) -> CacheInvalidationResponse:
	return CacheInvalidationResponse(invalidated=await cache.invalidate_all())


@router.delete(
	'/rate/{from_currency}/{to_currency}/cache',
	status_code=status.HTTP_204_NO_CONTENT,
	response_class=Response,
	summary='Drop the cached rate for one pair',
)
async def clear_pair_cache(
	from_currency: str,
	to_currency: str,
	resolver: Annotated[RateResolver, Depends(get_rate_resolver)],
) -> None:
	await resolver.invalidate(from_currency, to_currency)
