"""Run one uvicorn server per configured topic port, all sharing one app."""
import asyncio
import uvicorn
from .config import get_settings
from .logging import get_logger
from .main import app

logger = get_logger()


async def serve() -> None:
    settings = get_settings()
    ports = app.state.topics.ports
    if not ports:
        logger.error("no_topics_configured", hint="set EVENTGRID_TOPICS")
        raise SystemExit(1)

    servers = [
        uvicorn.Server(uvicorn.Config(app, host=settings.HOST, port=port, log_level=settings.LOG_LEVEL))
        for port in ports
    ]
    await asyncio.gather(*(server.serve() for server in servers))


def main() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    main()
