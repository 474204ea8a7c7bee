import logging
from collections.abc import Iterable

from domain.exceptions.currency import InvalidInputError, UnknownCurrencyError
from domain.models.currency import SupportedCurrency, normalize_currency_code
from infrastructure.persistence.repositories.currency import CurrencyRepository

logger = logging.getLogger(__name__)


class CurrencyService:
	def __init__(self, repository: CurrencyRepository):
		self.repository = repository

	async def initialize_supported_currencies(self, codes: Iterable[str]) -> int:
		logger.info('Initializing supported currencies...')
		currencies = [SupportedCurrency(code=normalize_currency_code(code), name=None) for code in codes]
		added = await self.repository.seed(currencies)
		logger.info(f'Seeded {added} new supported currencies.')
		return added

	async def get_supported_currencies(self) -> list[str]:
		return await self.repository.list_codes()

	async def exists(self, code: str) -> bool:
		return await self.repository.exists(normalize_currency_code(code))

	async def add_currency(self, code: str, name: str | None = None) -> SupportedCurrency:
		currency = SupportedCurrency(code=normalize_currency_code(code), name=name)
		if not await self.repository.add(currency):
			raise InvalidInputError(f'Currency {currency.code} is already supported')
		logger.info(f'Added supported currency {currency.code}')
		return currency

	async def ensure_known(self, *codes: str) -> None:
		for code in codes:
			normalized = normalize_currency_code(code)
			if not await self.repository.exists(normalized):
				raise UnknownCurrencyError(normalized)
