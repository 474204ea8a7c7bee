import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import cleanup_dependencies, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import currency, health, rates
from config.logging import setup_logging
from config.settings import get_settings

settings = get_settings()
setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info(f'Starting {settings.APP_NAME}...')

	factory = await init_dependencies()
	await factory.prune_rate_history()

	refresh_task = None
	if settings.REFRESH_ENABLED:
		refresh_task = asyncio.create_task(factory.scheduler.run())

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	if refresh_task is not None:
		await factory.scheduler.stop()
		await refresh_task
	await cleanup_dependencies()


def create_app(use_lifespan: bool = True) -> FastAPI:
	app = FastAPI(title=settings.APP_NAME, lifespan=lifespan if use_lifespan else None)
	app.include_router(currency.router)
	app.include_router(rates.router)
	app.include_router(health.router)
	register_exception_handlers(app)
	return app


app = create_app()
