# nosec B101


import pytest

from domain.models.currency import SupportedCurrency
from infrastructure.persistence.repositories.currency import CurrencyRepository


@pytest.mark.asyncio
async def test_seed_inserts_only_new_codes(database):
    repository = CurrencyRepository(database)

    first = await repository.seed([SupportedCurrency('USD', None), SupportedCurrency('EUR', 'Euro')])
    second = await repository.seed([SupportedCurrency('EUR', None), SupportedCurrency('GBP', None)])

    assert first == 2
    assert second == 1
    assert await repository.list_codes() == ['EUR', 'GBP', 'USD']


@pytest.mark.asyncio
async def test_seed_ignores_duplicates_within_batch(database):
    repository = CurrencyRepository(database)

    assert await repository.seed([SupportedCurrency('USD', None), SupportedCurrency('USD', None)]) == 1


@pytest.mark.asyncio
async def test_add_and_exists(database):
    repository = CurrencyRepository(database)

    assert await repository.exists('SEK') is False
    assert await repository.add(SupportedCurrency('SEK', 'Swedish Krona')) is True
    assert await repository.add(SupportedCurrency('SEK', None)) is False
    assert await repository.exists('sek') is True

    currencies = await repository.list_all()
    assert currencies == [SupportedCurrency('SEK', 'Swedish Krona')]
