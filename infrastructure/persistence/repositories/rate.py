import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, func, select

from domain.models.currency import Rate
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import RateHistoryDB

logger = logging.getLogger(__name__)


def _as_utc(moment: datetime) -> datetime:
	if moment.tzinfo is None:
		return moment.replace(tzinfo=UTC)
	return moment.astimezone(UTC)


class RateStore:
	"""Durable rate history backed by the rate_history table."""

	def __init__(self, database: Database):
		self.database = database

	async def save_all(self, rates: Iterable[Rate]) -> int:
		rows = [
			RateHistoryDB(
				base_currency=rate.base,
				target_currency=rate.target,
				rate=rate.value,
				observed_at=rate.observed_at,
				provider_name=rate.provider_name,
			)
			for rate in rates
		]
		if not rows:
			return 0

		async with self.database.session() as session:
			session.add_all(rows)

		logger.debug(f"Persisted {len(rows)} rate observations")
		return len(rows)

	async def find_latest(self, base: str, target: str) -> Rate | None:
		stmt = (
			self._pair_query(base, target)
			.order_by(RateHistoryDB.observed_at.desc(), RateHistoryDB.id.desc())
			.limit(1)
		)
		return await self._first(stmt)

	async def find_recent(
		self, base: str, target: str, since: datetime, limit: int = 100
	) -> list[Rate]:
		stmt = (
			self._pair_query(base, target)
			.where(RateHistoryDB.observed_at >= _as_utc(since))
			.order_by(RateHistoryDB.observed_at.desc(), RateHistoryDB.id.desc())
			.limit(limit)
		)
		async with self.database.session() as session:
			result = await session.execute(stmt)
			return [self._to_domain(row) for row in result.scalars().all()]

	async def find_most_recent_before(self, base: str, target: str, moment: datetime) -> Rate | None:
		stmt = (
			self._pair_query(base, target)
			.where(RateHistoryDB.observed_at <= _as_utc(moment))
			.order_by(RateHistoryDB.observed_at.desc(), RateHistoryDB.id.desc())
			.limit(1)
		)
		return await self._first(stmt)

	async def find_most_recent_after(self, base: str, target: str, moment: datetime) -> Rate | None:
		stmt = (
			self._pair_query(base, target)
			.where(RateHistoryDB.observed_at >= _as_utc(moment))
			.order_by(RateHistoryDB.observed_at.asc(), RateHistoryDB.id.asc())
			.limit(1)
		)
		return await self._first(stmt)

	async def delete_older_than(self, cutoff: datetime) -> int:
		stmt = delete(RateHistoryDB).where(RateHistoryDB.observed_at < _as_utc(cutoff))
		async with self.database.session() as session:
			result = await session.execute(stmt)
			deleted = result.rowcount or 0

		logger.info(f"Deleted {deleted} rate observations older than {cutoff.isoformat()}")
		return deleted

	async def count(self, base: str | None = None, target: str | None = None) -> int:
		stmt = select(func.count(RateHistoryDB.id))
		if base:
			stmt = stmt.where(RateHistoryDB.base_currency == base.upper())
		if target:
			stmt = stmt.where(RateHistoryDB.target_currency == target.upper())
		async with self.database.session() as session:
			return (await session.execute(stmt)).scalar_one()

	@staticmethod
	def _pair_query(base: str, target: str):
		return select(RateHistoryDB).where(
			RateHistoryDB.base_currency == base.upper(),
			RateHistoryDB.target_currency == target.upper(),
		)

	async def _first(self, stmt) -> Rate | None:
		async with self.database.session() as session:
			row = (await session.execute(stmt)).scalars().first()
			return self._to_domain(row) if row else None

	@staticmethod
	def _to_domain(row: RateHistoryDB) -> Rate:
		# sqlite drops tzinfo on the way back
		return Rate(
			base=row.base_currency,
			target=row.target_currency,
			value=row.rate,
			provider_name=row.provider_name,
			observed_at=_as_utc(row.observed_at),
		)
