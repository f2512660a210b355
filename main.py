"""
SWAPI proxy entry point
Serves the cached character catalog over HTTP
"""

import asyncio
import sys

import uvicorn
from loguru import logger

from swapi_proxy.api import create_app
from swapi_proxy.settings import global_settings


def configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, level=global_settings.log_level.upper())


async def main() -> None:
    """Main function"""
    configure_logging()
    logger.info("Starting SWAPI proxy...")

    app = create_app(global_settings)
    config = uvicorn.Config(
        app,
        host=global_settings.host,
        port=global_settings.port,
        log_level=global_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)

    logger.info(
        f"Application is running on: "
        f"http://localhost:{global_settings.port}/{global_settings.api_prefix}"
    )
    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
    finally:
        logger.info("SWAPI proxy exited")


if __name__ == "__main__":
    asyncio.run(main())
