from .requests import AddCurrencyRequest
from .responses import (
	CacheInvalidationResponse,
	ConversionResponse,
	CurrencyResponse,
	ExchangeRateResponse,
	HealthResponse,
	ProviderRatesResponse,
	RefreshResponse,
	SupportedCurrenciesResponse,
)

__all__ = [
	'AddCurrencyRequest',
	'CacheInvalidationResponse',
	'ConversionResponse',
	'CurrencyResponse',
	'ExchangeRateResponse',
	'HealthResponse',
	'ProviderRatesResponse',
	'RefreshResponse',
	'SupportedCurrenciesResponse',
]
