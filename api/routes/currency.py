from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_conversion_service, get_currency_service, get_rate_resolver
from api.schemas import (
	AddCurrencyRequest,
	ConversionResponse,
	CurrencyResponse,
	ExchangeRateResponse,
	SupportedCurrenciesResponse,
)
from application.services import ConversionService, CurrencyService, RateResolver

router = APIRouter(prefix='/api', tags=['currency'])


@router.get(
	'/convert/{from_currency}/{to_currency}/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert currency amount',
)
async def convert_currency(
	from_currency: str,
	to_currency: str,
	amount: Decimal,
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	result = await service.convert(amount, from_currency, to_currency)
	return ConversionResponse(**result)


@router.get(
	'/rate/{from_currency}/{to_currency}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get current exchange rate',
)
async def get_exchange_rate(
	from_currency: str,
	to_currency: str,
	resolver: Annotated[RateResolver, Depends(get_rate_resolver)],
	refresh: Annotated[bool, Query(description='Bypass cache and stored rates')] = False,
) -> ExchangeRateResponse:
	if refresh:
		rate = await resolver.fetch_fresh(from_currency, to_currency)
	else:
		rate = await resolver.resolve(from_currency, to_currency)
	return ExchangeRateResponse.from_rate(rate)


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies(
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> SupportedCurrenciesResponse:
	currencies = await service.get_supported_currencies()
	return SupportedCurrenciesResponse(currencies=currencies)


@router.post(
	'/currencies',
	response_model=CurrencyResponse,
	status_code=status.HTTP_201_CREATED,
	summary='Add a supported currency',
)
async def add_supported_currency(
	request: AddCurrencyRequest,
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> CurrencyResponse:
	currency = await service.add_currency(request.code, request.name)
	return CurrencyResponse(code=currency.code, name=currency.name)
