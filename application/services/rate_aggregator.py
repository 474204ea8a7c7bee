import asyncio
import logging
from collections.abc import Iterable, Sequence

from domain.exceptions.currency import (
    AllProvidersFailedError,
    InvalidInputError,
    NoProviderSupportError,
)
from domain.models.currency import Rate, normalize_currency_code, validate_currency_pair
from infrastructure.persistence.repositories.rate import RateStore
from infrastructure.providers.registry import ProviderEntry, ProviderRegistry
from infrastructure.providers.retry import call_with_retry

logger = logging.getLogger(__name__)


def select_best_rate(rates: Sequence[Rate], priorities: dict[str, int]) -> Rate:
    """Lowest value wins; ties go to the higher priority, then the earlier rate."""
    if not rates:
        raise ValueError("select_best_rate needs at least one rate")

    best = rates[0]
    for rate in rates[1:]:
        if rate.value < best.value:
            best = rate
        elif rate.value == best.value and priorities.get(rate.provider_name, 0) > priorities.get(
            best.provider_name, 0
        ):
            best = rate
    return best


class RateAggregator:
    def __init__(
        self,
        registry: ProviderRegistry,
        store: RateStore,
        timeout: float = 5.0,
        max_concurrency: int = 4,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.registry = registry
        self.store = store
        self.timeout = timeout
        self.max_concurrency = max_concurrency

    async def fetch_and_aggregate(self, base: str, target: str) -> Rate:
        base, target = validate_currency_pair(base, target)
        entries = self._supporting(base, target)

        rates, failures = await self._fan_out(entries, base, target)
        if not rates:
            logger.error(f"All {len(entries)} providers failed for {base} -> {target}")
            raise AllProvidersFailedError(base, target, failures)

        await self.store.save_all(rates)

        priorities = {entry.name: entry.priority for entry in entries}
        best = select_best_rate(rates, priorities)
        logger.info(
            f"Best rate {base} -> {target} = {best.value} from {best.provider_name} "
            f"({len(rates)}/{len(entries)} providers succeeded)"
        )
        return best

    async def fetch_and_aggregate_multiple(self, base: str, targets: Iterable[str]) -> dict[str, Rate]:
        base = normalize_currency_code(base, "Base currency")
        targets = list(targets or [])
        if not targets:
            raise InvalidInputError("Target currencies cannot be null or empty")

        results: dict[str, Rate] = {}
        for target in targets:
            try:
                rate = await self.fetch_and_aggregate(base, target)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Skipping {base} -> {target}: {e}")
                continue
            results[rate.target] = rate

        logger.info(f"Aggregated {len(results)}/{len(targets)} rates for base {base}")
        return results

    async def fetch_from_all_providers(self, base: str, target: str) -> list[Rate]:
        base, target = validate_currency_pair(base, target)
        entries = self._supporting(base, target)
        rates, _ = await self._fan_out(entries, base, target)
        return rates

    def provider_names(self) -> list[str]:
        return self.registry.names()

    def provider_count(self) -> int:
        return len(self.registry)

    def _supporting(self, base: str, target: str) -> list[ProviderEntry]:
        entries = self.registry.supporting(base, target)
        if not entries:
            raise NoProviderSupportError(base, target)
        return entries

    async def _fan_out(
        self, entries: list[ProviderEntry], base: str, target: str
    ) -> tuple[list[Rate], dict[str, str]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def query(entry: ProviderEntry) -> Rate | Exception:
            async with semaphore:
                try:
                    return await call_with_retry(
                        lambda: entry.provider.fetch_rate(base, target),
                        entry.retry_policy,
                        timeout=self.timeout,
                        provider_name=entry.name,
                    )
                except Exception as e:
                    logger.warning(f"Provider {entry.name} failed for {base} -> {target}: {e}")
                    return e

        results = await asyncio.gather(*(query(entry) for entry in entries))

        rates: list[Rate] = []
        failures: dict[str, str] = {}
        for entry, result in zip(entries, results, strict=True):
            if isinstance(result, Exception):
                failures[entry.name] = str(result) or type(result).__name__
            elif result.pair != (base, target):
                failures[entry.name] = f"returned a rate for {result.base} -> {result.target}"
            else:
                rates.append(result)
        return rates, failures
