"""Jinoca — Main entry point."""

import asyncio
import logging
import os
from typing import Optional

import uvicorn

from .abilities.image_gen import ImageGenerator
from .config import JinocaSettings, check_settings, load_settings
from .context import ContextBuilder
from .dispatch import CompletionDispatcher, ImageDispatcher
from .llm.openrouter import OpenRouterClient
from .orchestrator import Orchestrator
from .status import StatusStore
from .transport.base import Transport
from .transport.bridge import WhatsAppBridge
from .web import create_app

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("jinoca")


def configure_logging(log_file: str = "~/jinoca.log", debug: bool = False):
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),                                             # stderr (console)
            logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"),  # ~/jinoca.log
        ],
    )
    if debug:
        logger.setLevel(logging.DEBUG)


def build_orchestrator(settings: JinocaSettings, transport: Transport) -> Orchestrator:
    """Wire dispatchers and clients around a transport."""
    client = OpenRouterClient(
        api_key=settings.openrouter_api_key,
        model=settings.model,
        url=settings.completion_url,
        referer=settings.http_referer,
        title=settings.app_title,
        timeout=settings.request_timeout,
    )
    generator = ImageGenerator(base_url=settings.image_api_url, timeout=settings.request_timeout)
    context = ContextBuilder(transport, history_limit=settings.history_limit)
    return Orchestrator(
        transport,
        completions=CompletionDispatcher(transport, context, client),
        images=ImageDispatcher(transport, generator),
    )


async def pump_events(transport: Transport, store: StatusStore):
    """Feed transport lifecycle events into the status store."""
    async for event in transport.events():
        store.apply(event)


async def _start_transport(transport: Transport, store: StatusStore):
    try:
        await transport.start()
    except Exception as e:
        logger.critical(f"Failed to start WhatsApp transport: {e}", exc_info=True)
        store.on_start_failed(e)


async def run(settings: Optional[JinocaSettings] = None):
    """Main run loop: status server + WhatsApp transport + message pipeline."""
    settings = settings or load_settings()
    check_settings(settings)

    transport = WhatsAppBridge(
        command=settings.bridge_command,
        bridge_dir=settings.bridge_dir,
        chrome_path=settings.chrome_path,
    )
    store = StatusStore(reconnect=transport.restart, reconnect_delay=settings.reconnect_delay)
    orchestrator = build_orchestrator(settings, transport)

    server = uvicorn.Server(uvicorn.Config(
        create_app(store),
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "warning",
    ))

    logger.info(f"Status page on http://localhost:{settings.port}")
    background = [
        asyncio.create_task(pump_events(transport, store)),
        asyncio.create_task(orchestrator.serve()),
        asyncio.create_task(_start_transport(transport, store)),
    ]

    try:
        await server.serve()
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        for task in background:
            task.cancel()
        await asyncio.gather(*background, return_exceptions=True)
        await store.close()
        await transport.stop()
        logger.info("Jinoca stopped.")


def main():
    """Entry point."""
    settings = load_settings()
    configure_logging(settings.log_file, settings.debug)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
