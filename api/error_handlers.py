import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	AllProvidersFailedError,
	InvalidInputError,
	NoProviderSupportError,
	RefreshError,
	UnknownCurrencyError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidInputError)
	async def invalid_input_handler(request: Request, exc: InvalidInputError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(UnknownCurrencyError)
	async def unknown_currency_handler(request: Request, exc: UnknownCurrencyError):
		return JSONResponse(status_code=404, content={'detail': str(exc)})

	@app.exception_handler(NoProviderSupportError)
	async def no_provider_handler(request: Request, exc: NoProviderSupportError):
		return JSONResponse(status_code=422, content={'detail': str(exc)})

	@app.exception_handler(AllProvidersFailedError)
	async def all_providers_failed_handler(request: Request, exc: AllProvidersFailedError):
		logger.error(f'Provider error: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': 'Exchange rate service unavailable'}
		)

	@app.exception_handler(RefreshError)
	async def refresh_error_handler(request: Request, exc: RefreshError):
		logger.error(f'Refresh error: {exc}')
		return JSONResponse(status_code=500, content={'detail': 'Rate refresh failed'})

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return JSONResponse(status_code=500, content={'detail': 'Internal server error'})
