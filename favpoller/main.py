import asyncio
import logging
import signal

from favpoller.config import Settings, settings
from favpoller.core.signals import Signal
from favpoller.logging_config import setup_logging
from favpoller.pipeline import poll_favorite_businesses
from favpoller.services.api_client import ApiClient

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return

    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
    )
    logger.info("Sentry initialized")


def describe_item(item) -> str:
    if isinstance(item, dict):
        for key in ("item_id", "id", "display_name", "name"):
            if item.get(key):
                return str(item[key])
    return repr(item)[:60]


async def run(settings: Settings) -> None:
    enabled: Signal[bool] = Signal(settings.polling_enabled)
    stop = asyncio.Event()

    def toggle_enabled() -> None:
        enabled.set(not enabled.value)
        logger.info(f"Polling {'enabled' if enabled.value else 'paused'}")

    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, stop.set)
    loop.add_signal_handler(signal.SIGTERM, stop.set)
    loop.add_signal_handler(signal.SIGUSR1, toggle_enabled)

    async with ApiClient(
        settings.api.base_url,
        email=settings.api.email,
        password=settings.api.password,
    ) as api:
        batches = poll_favorite_businesses(enabled, api, settings)

        async def consume() -> None:
            async for items in batches:
                logger.info(
                    f"Received {len(items)} favorite(s): "
                    + ", ".join(describe_item(item) for item in items)
                )

        consumer = asyncio.create_task(consume())
        stopper = asyncio.create_task(stop.wait())
        try:
            await asyncio.wait({consumer, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            consumer.cancel()
            stopper.cancel()
            await asyncio.gather(consumer, stopper, return_exceptions=True)
            await batches.aclose()

    logger.info(f"{settings.app_name} stopped")


def main() -> None:
    # Configure logging first
    setup_logging(app_env=settings.app_env, log_level=settings.log_level)
    init_sentry(settings)

    logger.info(f"{settings.app_name} started (env={settings.app_env})")
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
