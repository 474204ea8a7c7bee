from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from application.services.rate_resolver import RateResolver
from domain.exceptions.currency import InvalidInputError
from domain.models.currency import RATE_PLACES


class ConversionService:
	def __init__(self, rate_resolver: RateResolver):
		self.rate_resolver = rate_resolver

	async def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> dict:
		try:
			amount = Decimal(str(amount))
		except (InvalidOperation, ValueError) as e:
			raise InvalidInputError(f'Amount {amount!r} is not a number') from e
		if not amount.is_finite() or amount <= 0:
			raise InvalidInputError('Amount must be greater than zero')

		rate = await self.rate_resolver.resolve(from_currency, to_currency)

		converted_amount = (amount * rate.value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)

		return {
			'from_currency': rate.base,
			'to_currency': rate.target,
			'original_amount': amount,
			'converted_amount': converted_amount,
			'exchange_rate': rate.value,
			'timestamp': rate.observed_at,
			'source': rate.provider_name,
		}
