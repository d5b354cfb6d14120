import asyncio
import logging

import uvicorn

from shared.core.config import settings

logger = logging.getLogger("run_services")

SERVICES = (
    ("auth_service.app.main:app", settings.AUTH_SERVICE_PORT),
    ("inventory_service.app.main:app", settings.INVENTORY_SERVICE_PORT),
)


def build_server(app_path: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(
        app_path,
        host=settings.SERVICE_HOST,
        port=port,
        reload=settings.SERVICE_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return uvicorn.Server(config)


async def start_servers():
    servers = [build_server(app_path, port) for app_path, port in SERVICES]
    for app_path, port in SERVICES:
        logger.info("Starting %s on %s:%s", app_path, settings.SERVICE_HOST, port)

    # Both services share one event loop
    await asyncio.gather(*(server.serve() for server in servers))


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(start_servers())
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
