# nosec B101


import pytest

from infrastructure.providers.registry import ProviderRegistry
from infrastructure.providers.retry import NO_RETRY, RetryPolicy
from tests.helpers import StubProvider


def test_register_rejects_duplicate_names():
    registry = ProviderRegistry()
    registry.register(StubProvider('fixerio', results=['0.85']))

    with pytest.raises(ValueError, match='already registered'):
        registry.register(StubProvider('fixerio', results=['0.86']))


def test_supporting_orders_by_priority_then_registration():
    registry = ProviderRegistry()
    registry.register(StubProvider('low', priority=10, results=['1']))
    registry.register(StubProvider('first-high', priority=100, results=['1']))
    registry.register(StubProvider('second-high', priority=100, results=['1']))
    registry.register(StubProvider('unsupported', priority=500, results=['1'], supported=False))

    names = [entry.name for entry in registry.supporting('USD', 'EUR')]

    assert names == ['first-high', 'second-high', 'low']


def test_supporting_treats_raising_supports_as_unsupported():
    registry = ProviderRegistry()
    registry.register(StubProvider('broken', results=['1'], supported=RuntimeError('boom')))
    registry.register(StubProvider('ok', results=['1']))

    assert [entry.name for entry in registry.supporting('USD', 'EUR')] == ['ok']


def test_entries_use_default_or_explicit_retry_policy():
    default_policy = RetryPolicy(max_attempts=5)
    registry = ProviderRegistry(default_retry_policy=default_policy)
    registry.register(StubProvider('a', results=['1']))
    registry.register(StubProvider('b', results=['1']), retry_policy=NO_RETRY)

    policies = {entry.name: entry.retry_policy for entry in registry.supporting('USD', 'EUR')}

    assert policies == {'a': default_policy, 'b': NO_RETRY}


def test_unregister_get_and_container_protocol():
    registry = ProviderRegistry()
    provider = StubProvider('fixerio', priority=100, results=['1'])
    registry.register(provider)

    assert registry.get('fixerio') is provider
    assert 'fixerio' in registry
    assert len(registry) == 1
    assert list(registry) == [provider]
    assert registry.priority_of('fixerio') == 100
    assert registry.priority_of('missing') == 0

    assert registry.unregister('fixerio') is provider
    assert registry.unregister('fixerio') is None
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_close_closes_every_provider():
    registry = ProviderRegistry()
    providers = [StubProvider('a', results=['1']), StubProvider('b', results=['1'])]
    for provider in providers:
        registry.register(provider)

    await registry.close()

    assert all(provider.closed for provider in providers)
