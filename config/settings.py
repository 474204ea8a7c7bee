from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./fx_rates.db'

	REDIS_URL: str = 'redis://localhost:6379'

	# Providers without a key are not registered
	FIXERIO_API_KEY: str = ''
	OPENEXCHANGE_APP_ID: str = ''
	CURRENCYAPI_API_KEY: str = ''

	MOCK_PROVIDERS_ENABLED: bool = True
	MOCK_PROVIDER_SEED: int = 42

	# Resolution
	CACHE_TTL_SECONDS: int = 3600
	FRESHNESS_WINDOW_SECONDS: int = 3600

	# Provider calls
	PROVIDER_TIMEOUT_SECONDS: float = 5.0
	PROVIDER_MAX_CONCURRENCY: int = 4
	RETRY_MAX_ATTEMPTS: int = 3
	RETRY_BASE_DELAY_SECONDS: float = 1.0
	RETRY_MULTIPLIER: float = 2.0
	RETRY_MAX_DELAY_SECONDS: float = 10.0

	# Background refresh
	REFRESH_ENABLED: bool = True
	REFRESH_INTERVAL_SECONDS: float = 3600.0
	REFRESH_INITIAL_DELAY_SECONDS: float = 10.0

	SUPPORTED_CURRENCIES: str = 'USD,EUR,GBP,JPY,CHF,CAD,AUD,NGN'
	RATE_RETENTION_DAYS: int = 90

	# Application
	APP_NAME: str = 'FX Rate Engine'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@field_validator('PROVIDER_MAX_CONCURRENCY', 'RETRY_MAX_ATTEMPTS')
	@classmethod
	def at_least_one(cls, v: int) -> int:
		if v < 1:
			raise ValueError('must be at least 1')
		return v

	@property
	def supported_currency_codes(self) -> list[str]:
		return [code.strip().upper() for code in self.SUPPORTED_CURRENCIES.split(',') if code.strip()]


@lru_cache
def get_settings() -> Settings:
	return Settings()
