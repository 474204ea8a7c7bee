# nosec B101


from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from application.services.conversion_service import ConversionService
from domain.exceptions.currency import InvalidInputError, UnknownCurrencyError
from tests.helpers import NOW, make_rate


@pytest.mark.asyncio
async def test_convert_multiplies_and_rounds_half_up():
    resolver = AsyncMock()
    resolver.resolve.return_value = make_rate('0.333333', provider='fixerio')
    service = ConversionService(resolver)

    result = await service.convert(Decimal('1.5'), 'usd', 'eur')

    resolver.resolve.assert_awaited_once_with('usd', 'eur')
    assert result == {
        'from_currency': 'USD',
        'to_currency': 'EUR',
        'original_amount': Decimal('1.5'),
        'converted_amount': Decimal('0.500000'),
        'exchange_rate': Decimal('0.333333'),
        'timestamp': NOW,
        'source': 'fixerio',
    }


@pytest.mark.asyncio
async def test_convert_quantizes_to_six_places():
    resolver = AsyncMock()
    resolver.resolve.return_value = make_rate('1.234567')
    service = ConversionService(resolver)

    result = await service.convert(Decimal('100.005'), 'USD', 'EUR')

    assert result['converted_amount'] == Decimal('123.462873')


@pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-10'), 'abc', Decimal('Infinity')])
@pytest.mark.asyncio
async def test_convert_rejects_invalid_amounts(amount):
    resolver = AsyncMock()
    service = ConversionService(resolver)

    with pytest.raises(InvalidInputError):
        await service.convert(amount, 'USD', 'EUR')

    resolver.resolve.assert_not_called()


@pytest.mark.asyncio
async def test_convert_propagates_resolution_errors():
    resolver = AsyncMock()
    resolver.resolve.side_effect = UnknownCurrencyError('XYZ')
    service = ConversionService(resolver)

    with pytest.raises(UnknownCurrencyError):
        await service.convert(Decimal('10'), 'USD', 'XYZ')
