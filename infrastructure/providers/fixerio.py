from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import Rate
from infrastructure.providers.base import HTTPRateProvider

# Fixer error codes that mean "try again later"
TRANSIENT_ERROR_CODES = {104, 106, 503}


class FixerIOProvider(HTTPRateProvider):
	BASE_URL = 'http://data.fixer.io/api'

	def __init__(
		self,
		api_key: str,
		client: httpx.AsyncClient | None = None,
		timeout: float = 5,
		priority: int = 100,
		supported_currencies: Iterable[str] | None = None,
	):
		self.api_key = api_key
		super().__init__(
			name='fixerio',
			priority=priority,
			client=client,
			timeout=timeout,
			supported_currencies=supported_currencies,
		)

	def _auth_params(self) -> dict[str, str]:
		return {'access_key': self.api_key}

	def _check_payload(self, data: dict[str, Any]) -> None:
		if data.get('success', False):
			return
		error = data.get('error') or {}
		info = error.get('info') or error.get('type') or 'Unknown error'
		raise ProviderError(
			f'Fixer.io API error: {info}',
			provider_name=self.name,
			transient=error.get('code') in TRANSIENT_ERROR_CODES,
		)

	async def fetch_rate(self, base: str, target: str) -> Rate:
		data = await self._request('latest', {'base': base, 'symbols': target})

		api_timestamp = data.get('timestamp')
		observed_at = datetime.fromtimestamp(api_timestamp, tz=UTC) if api_timestamp else None
		return self._build_rate(base, target, (data.get('rates') or {}).get(target), observed_at)
