from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class SupportedCurrencyDB(Base):
	__tablename__ = 'supported_currencies'

	code: Mapped[str] = mapped_column(String(3), primary_key=True)
	name: Mapped[str | None] = mapped_column(String(100), nullable=True)


class RateHistoryDB(Base):
	"""Append-only record of every rate a provider returned."""

	__tablename__ = 'rate_history'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	base_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	target_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=19, scale=6), nullable=False)
	observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
	provider_name: Mapped[str] = mapped_column(String(50), nullable=False)

	__table_args__ = (
		Index('idx_rate_history_pair_observed', 'base_currency', 'target_currency', 'observed_at'),
		Index('idx_rate_history_observed', 'observed_at'),
	)
