# nosec B101


import pytest
import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from infrastructure.cache.redis_cache import RateCache
from tests.helpers import make_rate


def _cached_payload(**overrides):
    payload = {
        'base': 'USD',
        'target': 'EUR',
        'value': '0.85',
        'provider_name': 'fixerio',
        'observed_at': '2025-11-05T10:30:00+00:00',
    }
    payload.update(overrides)
    return json.dumps(payload)


def test_make_key_normalizes_case():
    assert RateCache.make_key('usd', ' eur') == 'exchange_rate:USD:EUR'


@pytest.mark.asyncio
async def test_get_cache_hit_returns_rate():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = _cached_payload()
    cache = RateCache(redis_client=mock_redis)

    result = await cache.get('usd', 'eur')

    assert result is not None
    assert result.pair == ('USD', 'EUR')
    assert result.value == Decimal('0.85')
    assert result.provider_name == 'fixerio'
    assert result.observed_at == datetime(2025, 11, 5, 10, 30, tzinfo=UTC)
    mock_redis.get.assert_called_once_with('exchange_rate:USD:EUR')


@pytest.mark.asyncio
async def test_get_cache_miss_returns_none():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = None
    cache = RateCache(redis_client=mock_redis)

    assert await cache.get('USD', 'EUR') is None
    mock_redis.delete.assert_not_called()


@pytest.mark.parametrize('data', [
    'not json',
    json.dumps({'base': 'USD'}),
    _cached_payload(value='-1'),
    _cached_payload(observed_at='yesterday'),
    _cached_payload(target='GBP'),
])
@pytest.mark.asyncio
async def test_get_corrupt_entry_is_evicted(data):
    mock_redis = AsyncMock()
    mock_redis.get.return_value = data
    cache = RateCache(redis_client=mock_redis)

    assert await cache.get('USD', 'EUR') is None
    mock_redis.delete.assert_awaited_once_with('exchange_rate:USD:EUR')


@pytest.mark.asyncio
async def test_get_redis_failure_degrades_to_miss():
    mock_redis = AsyncMock()
    mock_redis.get.side_effect = RedisConnectionError('down')
    cache = RateCache(redis_client=mock_redis)

    assert await cache.get('USD', 'EUR') is None


@pytest.mark.asyncio
async def test_set_writes_with_default_ttl():
    mock_redis = AsyncMock()
    cache = RateCache(redis_client=mock_redis, rate_ttl=timedelta(minutes=30))
    rate = make_rate('0.85')

    assert await cache.set('USD', 'EUR', rate) is True

    key, ttl, data = mock_redis.setex.call_args[0]
    assert key == 'exchange_rate:USD:EUR'
    assert ttl == timedelta(minutes=30)
    assert json.loads(data) == {
        'base': 'USD',
        'target': 'EUR',
        'value': '0.850000',
        'provider_name': 'fixerio',
        'observed_at': rate.observed_at.isoformat(),
    }


@pytest.mark.asyncio
async def test_set_uses_explicit_ttl():
    mock_redis = AsyncMock()
    cache = RateCache(redis_client=mock_redis)

    await cache.set('USD', 'EUR', make_rate(), ttl=timedelta(seconds=5))

    assert mock_redis.setex.call_args[0][1] == timedelta(seconds=5)


@pytest.mark.asyncio
async def test_set_skips_same_currency_and_mismatched_pair():
    mock_redis = AsyncMock()
    cache = RateCache(redis_client=mock_redis)

    assert await cache.set('USD', 'usd', make_rate()) is False
    assert await cache.set('USD', 'GBP', make_rate()) is False
    mock_redis.setex.assert_not_called()


@pytest.mark.asyncio
async def test_set_swallows_redis_failure():
    mock_redis = AsyncMock()
    mock_redis.setex.side_effect = RedisConnectionError('down')
    cache = RateCache(redis_client=mock_redis)

    assert await cache.set('USD', 'EUR', make_rate()) is False


@pytest.mark.asyncio
async def test_roundtrip_preserves_rate():
    store = {}
    mock_redis = AsyncMock()
    mock_redis.setex.side_effect = lambda key, ttl, value: store.__setitem__(key, value)
    mock_redis.get.side_effect = lambda key: store.get(key)
    cache = RateCache(redis_client=mock_redis)
    rate = make_rate('1.234567', provider='openexchange')

    await cache.set('USD', 'EUR', rate)

    assert await cache.get('USD', 'EUR') == rate


@pytest.mark.asyncio
async def test_invalidate_deletes_pair_key():
    mock_redis = AsyncMock()
    cache = RateCache(redis_client=mock_redis)

    await cache.invalidate('usd', 'eur')

    mock_redis.delete.assert_awaited_once_with('exchange_rate:USD:EUR')


@pytest.mark.asyncio
async def test_invalidate_all_scans_prefix():
    keys = ['exchange_rate:USD:EUR', 'exchange_rate:EUR:USD']

    async def scan_iter(match=None, count=None):
        assert match == 'exchange_rate:*'
        for key in keys:
            yield key

    mock_redis = AsyncMock()
    mock_redis.scan_iter = scan_iter
    mock_redis.delete.return_value = 2
    cache = RateCache(redis_client=mock_redis)

    assert await cache.invalidate_all() == 2
    mock_redis.delete.assert_awaited_once_with(*keys)


@pytest.mark.asyncio
async def test_invalidate_all_swallows_redis_failure():
    async def scan_iter(match=None, count=None):
        raise RedisConnectionError('down')
        yield  # pragma: no cover

    mock_redis = AsyncMock()
    mock_redis.scan_iter = scan_iter
    cache = RateCache(redis_client=mock_redis)

    assert await cache.invalidate_all() == 0


@pytest.mark.asyncio
async def test_get_wrong_type_entry_is_evicted():
    mock_redis = AsyncMock()
    mock_redis.get.side_effect = ResponseError('WRONGTYPE Operation against a key holding the wrong kind of value')
    cache = RateCache(redis_client=mock_redis)

    assert await cache.get('USD', 'EUR') is None
    mock_redis.delete.assert_awaited_once_with('exchange_rate:USD:EUR')


@pytest.mark.asyncio
async def test_get_connection_failure_does_not_evict():
    mock_redis = AsyncMock()
    mock_redis.get.side_effect = RedisConnectionError('down')
    cache = RateCache(redis_client=mock_redis)

    assert await cache.get('USD', 'EUR') is None
    mock_redis.delete.assert_not_called()
