from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import Rate
from infrastructure.providers.base import HTTPRateProvider


class OpenExchangeProvider(HTTPRateProvider):
    BASE_URL = "https://openexchangerates.org/api"

    def __init__(
        self,
        app_id: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5,
        priority: int = 90,
        supported_currencies: Iterable[str] | None = None,
    ):
        self.app_id = app_id
        super().__init__(
            name="openexchange",
            priority=priority,
            client=client,
            timeout=timeout,
            supported_currencies=supported_currencies,
        )

    def _auth_params(self) -> dict[str, str]:
        return {"app_id": self.app_id}

    def _check_payload(self, data: dict[str, Any]) -> None:
        if data.get("error"):
            message = data.get("description", data.get("message", "Unknown error"))
            status = data.get("status") or 0
            raise ProviderError(
                f"OpenExchange API error: {message}",
                provider_name=self.name,
                transient=status == 429 or status >= 500,
            )

    async def fetch_rate(self, base: str, target: str) -> Rate:
        data = await self._request("latest.json", {"base": base, "symbols": target})

        api_timestamp = data.get("timestamp")
        observed_at = datetime.fromtimestamp(api_timestamp, tz=UTC) if api_timestamp else None
        return self._build_rate(base, target, (data.get("rates") or {}).get(target), observed_at)
