import asyncio
import logging
import signal

from dotenv import load_dotenv

from application.service_factory import ServiceFactory
from config.logging import setup_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


async def main():
    """Run the refresh loop outside the API process until SIGINT or SIGTERM."""
    load_dotenv()
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    logger.info('=' * 60)
    logger.info('RATE REFRESHER STARTING')
    logger.info('=' * 60)
    logger.info(f'Currencies: {settings.supported_currency_codes}')
    logger.info(f'Refresh interval: {settings.REFRESH_INTERVAL_SECONDS}s')

    factory = ServiceFactory(settings)
    logger.info('Initializing services...')
    await factory.create()
    await factory.prune_rate_history()

    scheduler = factory.scheduler
    loop = asyncio.get_running_loop()
    stop_tasks = []

    def signal_handler(sig):
        logger.info(f'Received signal {sig.name}, shutting down gracefully...')
        stop_tasks.append(asyncio.create_task(scheduler.stop()))

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler, sig)

    try:
        await scheduler.run()
        if stop_tasks:
            await asyncio.gather(*stop_tasks)
    finally:
        await factory.cleanup()
        logger.info('Cleanup completed')


def run():
    asyncio.run(main())


if __name__ == '__main__':
    run()
