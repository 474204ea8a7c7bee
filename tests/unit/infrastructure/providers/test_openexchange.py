# nosec B101


from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from domain.exceptions.currency import ProviderError, UnsupportedPairError
from infrastructure.providers.openexchange import OpenExchangeProvider


def _client_returning(payload):
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    mock_client.get.return_value = mock_response
    return mock_client


@pytest.mark.asyncio
async def test_fetch_rate_success():
    mock_client = _client_returning({'timestamp': 1762338600, 'base': 'USD', 'rates': {'EUR': 0.8512}})
    provider = OpenExchangeProvider(app_id='app', client=mock_client)

    rate = await provider.fetch_rate('USD', 'EUR')

    assert rate.value == Decimal('0.8512')
    assert rate.provider_name == 'openexchange'
    assert rate.observed_at == datetime.fromtimestamp(1762338600, tz=UTC)
    call_args = mock_client.get.call_args
    assert call_args[0][0] == 'https://openexchangerates.org/api/latest.json'
    assert call_args[1]['params'] == {'base': 'USD', 'symbols': 'EUR', 'app_id': 'app'}


@pytest.mark.asyncio
async def test_fetch_rate_api_error_is_permanent_for_client_errors():
    mock_client = _client_returning(
        {'error': True, 'status': 401, 'message': 'invalid_app_id', 'description': 'Invalid App ID'}
    )
    provider = OpenExchangeProvider(app_id='bad', client=mock_client)

    with pytest.raises(ProviderError, match='Invalid App ID') as exc_info:
        await provider.fetch_rate('USD', 'EUR')

    assert exc_info.value.transient is False


@pytest.mark.asyncio
async def test_fetch_rate_api_error_rate_limit_is_transient():
    mock_client = _client_returning({'error': True, 'status': 429, 'message': 'too_many_requests'})
    provider = OpenExchangeProvider(app_id='app', client=mock_client)

    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_rate('USD', 'EUR')

    assert exc_info.value.transient is True


@pytest.mark.asyncio
async def test_fetch_rate_missing_target():
    provider = OpenExchangeProvider(app_id='app', client=_client_returning({'rates': {}}))

    with pytest.raises(UnsupportedPairError):
        await provider.fetch_rate('USD', 'EUR')


@pytest.mark.asyncio
async def test_fetch_rate_without_timestamp_uses_now():
    before = datetime.now(UTC)
    provider = OpenExchangeProvider(app_id='app', client=_client_returning({'rates': {'EUR': 0.9}}))

    rate = await provider.fetch_rate('USD', 'EUR')

    assert rate.observed_at >= before
