from datetime import UTC, datetime
from decimal import Decimal

from domain.models.currency import Rate

NOW = datetime(2025, 11, 5, 12, 0, 0, tzinfo=UTC)


def make_rate(
    value: str = '0.85',
    provider: str = 'fixerio',
    base: str = 'USD',
    target: str = 'EUR',
    observed_at: datetime = NOW,
) -> Rate:
    return Rate(
        base=base,
        target=target,
        value=Decimal(value),
        provider_name=provider,
        observed_at=observed_at,
    )


class StubProvider:
    """Provider double with a scripted answer per call."""

    def __init__(self, name, priority=50, results=None, supported=True):
        self.name = name
        self.priority = priority
        self.results = list(results or [])
        self.supported = supported
        self.calls = []
        self.closed = False

    def supports(self, base, target):
        if isinstance(self.supported, Exception):
            raise self.supported
        return self.supported

    async def fetch_rate(self, base, target):
        self.calls.append((base, target))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, str):
            return make_rate(result, provider=self.name, base=base, target=target)
        return result

    async def close(self):
        self.closed = True
