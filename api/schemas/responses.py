from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from domain.models.currency import Rate


class ConversionResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Converted amount')
	exchange_rate: Decimal = Field(..., description='Exchange rate used for conversion')
	timestamp: datetime = Field(..., description='When the rate was observed')
	source: str = Field(..., description='Provider of the rate')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'from_currency': 'USD',
				'to_currency': 'EUR',
				'original_amount': 100.00,
				'converted_amount': 85.50,
				'exchange_rate': 0.855,
				'timestamp': '2025-09-27T10:30:00Z',
				'source': 'fixerio',
			}
		}
	)


class ExchangeRateResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	rate: Decimal = Field(..., description='Exchange rate')
	timestamp: datetime = Field(..., description='When the rate was observed')
	source: str = Field(..., description='Provider of the rate')

	@classmethod
	def from_rate(cls, rate: Rate) -> 'ExchangeRateResponse':
		return cls(
			from_currency=rate.base,
			to_currency=rate.target,
			rate=rate.value,
			timestamp=rate.observed_at,
			source=rate.provider_name,
		)


class ProviderRatesResponse(BaseModel):
	from_currency: str
	to_currency: str
	rates: list[ExchangeRateResponse] = Field(description='One entry per provider that answered')


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	model_config = ConfigDict(json_schema_extra={'examples': [{'currencies': ['USD', 'EUR', 'GBP', 'JPY']}]})


class CurrencyResponse(BaseModel):
	code: str
	name: str | None = None


class RefreshResponse(BaseModel):
	refreshed: int = Field(description='Number of pairs refreshed and cached')


class CacheInvalidationResponse(BaseModel):
	invalidated: int = Field(description='Number of cache entries removed')


class HealthResponse(BaseModel):
	status: str
	providers: list[str]
	cache: bool
	database: bool
	refreshing: bool
