"""Explicit registry of the rate providers active in this process."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from infrastructure.providers.base import ExchangeRateProvider
from infrastructure.providers.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderEntry:
    provider: ExchangeRateProvider
    retry_policy: RetryPolicy

    @property
    def name(self) -> str:
        return self.provider.name

    @property
    def priority(self) -> int:
        return self.provider.priority


class ProviderRegistry:
    def __init__(self, default_retry_policy: RetryPolicy | None = None):
        self.default_retry_policy = default_retry_policy or RetryPolicy()
        self._entries: dict[str, ProviderEntry] = {}

    def register(self, provider: ExchangeRateProvider, retry_policy: RetryPolicy | None = None) -> None:
        name = provider.name
        if not name:
            raise ValueError("Provider name cannot be empty.")
        if name in self._entries:
            raise ValueError(f"Provider '{name}' is already registered")

        self._entries[name] = ProviderEntry(provider, retry_policy or self.default_retry_policy)
        logger.info(f"Registered provider {name} (priority {provider.priority})")

    def unregister(self, name: str) -> ExchangeRateProvider | None:
        entry = self._entries.pop(name, None)
        return entry.provider if entry else None

    def get(self, name: str) -> ExchangeRateProvider | None:
        entry = self._entries.get(name)
        return entry.provider if entry else None

    def priority_of(self, name: str) -> int:
        entry = self._entries.get(name)
        return entry.priority if entry else 0

    def names(self) -> list[str]:
        return list(self._entries)

    def supporting(self, base: str, target: str) -> list[ProviderEntry]:
        """Entries supporting the pair, highest priority first.

        sorted() is stable, so equal priorities keep registration order.
        """
        entries = []
        for entry in self._entries.values():
            try:
                if entry.provider.supports(base, target):
                    entries.append(entry)
            except Exception as e:
                logger.error(f"Provider {entry.name} supports() check failed for {base} -> {target}: {e}")
        return sorted(entries, key=lambda entry: entry.priority, reverse=True)

    async def close(self) -> None:
        for entry in self._entries.values():
            try:
                await entry.provider.close()
            except Exception as e:
                logger.error(f"Failed to close provider {entry.name}: {e}")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExchangeRateProvider]:
        return iter(entry.provider for entry in self._entries.values())

    def __contains__(self, name: object) -> bool:
        return name in self._entries
