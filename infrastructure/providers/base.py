import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

import httpx

from domain.exceptions.currency import InvalidInputError, ProviderError, UnsupportedPairError
from domain.models.currency import Rate

logger = logging.getLogger(__name__)


@runtime_checkable
class ExchangeRateProvider(Protocol):
    """Contract every rate source implements, real or mock."""

    @property
    def name(self) -> str: ...

    @property
    def priority(self) -> int: ...

    def supports(self, base: str, target: str) -> bool: ...

    async def fetch_rate(self, base: str, target: str) -> Rate: ...

    async def close(self) -> None: ...


class HTTPRateProvider(ABC):
    """A base class for HTTP providers, handling common request and error logic."""

    BASE_URL: str = ""

    def __init__(
        self,
        name: str,
        priority: int,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5,
        supported_currencies: Iterable[str] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self._name = name
        self._priority = priority
        self.timeout = timeout
        self.supported_currencies = (
            frozenset(code.upper() for code in supported_currencies)
            if supported_currencies
            else None
        )
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"accept": "application/json", **(headers or {})},
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

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

    @abstractmethod
    def _auth_params(self) -> dict[str, str]:
        ...

    @abstractmethod
    def _check_payload(self, data: dict[str, Any]) -> None:
        """Raise ProviderError when a 200 response carries an API-level error."""

    @abstractmethod
    async def fetch_rate(self, base: str, target: str) -> Rate:
        ...

    async def _request(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.BASE_URL}/{endpoint}"
        query = {**(params or {}), **self._auth_params()}

        try:
            response = await self._client.get(url, params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ProviderError(
                f"{self.name} HTTP error {status}: {e.response.text[:200]}",
                provider_name=self.name,
                transient=status == 429 or status >= 500,
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(
                f"{self.name} request failed: {e.__class__.__name__}",
                provider_name=self.name,
                transient=True,
            ) from e
        except ValueError as e:
            raise ProviderError(
                f"{self.name} response parsing error: {str(e)}", provider_name=self.name
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} returned an unexpected payload", provider_name=self.name)

        self._check_payload(data)
        return data

    def _build_rate(self, base: str, target: str, value: Any, observed_at: datetime | None) -> Rate:
        if value is None:
            raise UnsupportedPairError(base, target, provider_name=self.name)
        try:
            return Rate(
                base=base,
                target=target,
                value=Decimal(str(value)),
                provider_name=self.name,
                observed_at=observed_at or datetime.now(UTC),
            )
        except InvalidInputError as e:
            raise ProviderError(
                f"{self.name} returned an invalid rate for {base} -> {target}: {e}",
                provider_name=self.name,
            ) from e

    async def close(self) -> None:
        await self._client.aclose()

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name}, priority={self.priority})>"
