from collections.abc import Iterable
from datetime import datetime
from typing import Any

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import Rate
from infrastructure.providers.base import HTTPRateProvider


class CurrencyAPIProvider(HTTPRateProvider):
    BASE_URL = "https://api.currencyapi.com/v3"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5,
        priority: int = 80,
        supported_currencies: Iterable[str] | None = None,
    ):
        self.api_key = api_key
        super().__init__(
            name="currencyapi",
            priority=priority,
            client=client,
            timeout=timeout,
            supported_currencies=supported_currencies,
            headers={"apikey": api_key},
        )

    def _auth_params(self) -> dict[str, str]:
        # key travels in the apikey header
        return {}

    def _check_payload(self, data: dict[str, Any]) -> None:
        if "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise ProviderError(f"CurrencyAPI error: {message}", provider_name=self.name)

    async def fetch_rate(self, base: str, target: str) -> Rate:
        data = await self._request("latest", {"base_currency": base, "currencies": target})

        entry = (data.get("data") or {}).get(target) or {}
        last_updated = (data.get("meta") or {}).get("last_updated_at")
        observed_at = None
        if last_updated:
            try:
                observed_at = datetime.fromisoformat(last_updated.replace("Z", "+00:00"))
            except ValueError as e:
                raise ProviderError(
                    f"CurrencyAPI returned a bad timestamp: {last_updated!r}", provider_name=self.name
                ) from e
        return self._build_rate(base, target, entry.get("value"), observed_at)
