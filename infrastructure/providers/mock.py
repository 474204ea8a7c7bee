"""Mock provider for local development and tests."""

import logging
import random
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

from domain.exceptions.currency import ProviderError, UnsupportedPairError
from domain.models.currency import Rate

logger = logging.getLogger(__name__)


class MockRateProvider:
    """Generates rates within a range from an explicitly seeded generator.

    Nothing here touches module-level random state, so two providers built with
    the same seed produce the same sequence of rates.
    """

    def __init__(
        self,
        name: str,
        priority: int = 50,
        rng: random.Random | None = None,
        low: Decimal = Decimal("0.5"),
        high: Decimal = Decimal("2.0"),
        failure_rate: float = 0.0,
        supported_currencies: Iterable[str] | None = None,
        unavailable_pairs: Iterable[tuple[str, str]] | None = None,
    ):
        if low <= 0 or high < low:
            raise ValueError("Mock rate range must satisfy 0 < low <= high")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")

        self._name = name
        self._priority = priority
        self._rng = rng or random.Random(0)
        self.low = Decimal(low)
        self.high = Decimal(high)
        self.failure_rate = failure_rate
        self.supported_currencies = (
            frozenset(code.upper() for code in supported_currencies)
            if supported_currencies
            else None
        )
        # pairs that pass supports() but fail on fetch
        self.unavailable_pairs = {
            (base.upper(), target.upper()) for base, target in (unavailable_pairs or ())
        }

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    def supports(self, base: str, target: str) -> bool:
        if not base or not target:
            return False
        if self.supported_currencies is None:
            return True
        return base.upper() in self.supported_currencies and target.upper() in self.supported_currencies

    async def fetch_rate(self, base: str, target: str) -> Rate:
        if (base.upper(), target.upper()) in self.unavailable_pairs:
            raise UnsupportedPairError(base, target, provider_name=self.name)

        if self.failure_rate and self._rng.random() < self.failure_rate:
            raise ProviderError(
                f"{self.name} simulated outage", provider_name=self.name, transient=True
            )

        spread = float(self.high - self.low)
        value = self.low + Decimal(str(round(self._rng.random() * spread, 6)))
        logger.debug(f"{self.name} generated rate {base} -> {target} = {value}")

        return Rate(
            base=base,
            target=target,
            value=value,
            provider_name=self.name,
            observed_at=datetime.now(UTC),
        )

    async def close(self) -> None:
        return None

    def __repr__(self):
        return f"<MockRateProvider(name={self.name}, priority={self.priority})>"
