import logging
from collections.abc import Iterable

from sqlalchemy import select

from domain.models.currency import SupportedCurrency
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import SupportedCurrencyDB

logger = logging.getLogger(__name__)


class CurrencyRepository:
	def __init__(self, database: Database):
		self.database = database

	async def exists(self, code: str) -> bool:
		async with self.database.session() as session:
			return await session.get(SupportedCurrencyDB, code.upper()) is not None

	async def list_all(self) -> list[SupportedCurrency]:
		async with self.database.session() as session:
			result = await session.execute(select(SupportedCurrencyDB).order_by(SupportedCurrencyDB.code))
			return [SupportedCurrency(code=c.code, name=c.name) for c in result.scalars().all()]

	async def list_codes(self) -> list[str]:
		async with self.database.session() as session:
			result = await session.execute(select(SupportedCurrencyDB.code).order_by(SupportedCurrencyDB.code))
			return list(result.scalars().all())

	async def add(self, currency: SupportedCurrency) -> bool:
		"""Insert the currency; returns False when it was already present."""
		async with self.database.session() as session:
			if await session.get(SupportedCurrencyDB, currency.code) is not None:
				return False
			session.add(SupportedCurrencyDB(code=currency.code, name=currency.name))
		return True

	async def seed(self, currencies: Iterable[SupportedCurrency]) -> int:
		async with self.database.session() as session:
			existing = set((await session.execute(select(SupportedCurrencyDB.code))).scalars().all())
			new_currencies = []
			for currency in currencies:
				if currency.code not in existing:
					existing.add(currency.code)
					new_currencies.append(SupportedCurrencyDB(code=currency.code, name=currency.name))
			session.add_all(new_currencies)

		if new_currencies:
			logger.info(f"Seeded {len(new_currencies)} supported currencies")
		return len(new_currencies)
