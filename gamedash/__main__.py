"""Run the dashboard and relay gateway: ``python -m gamedash``."""

import logging

import uvicorn

from .config import Settings
from .main import create_app


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    logger = logging.getLogger("gamedash")
    logger.info("Server running at http://%s:%s/", settings.host, settings.port)
    logger.info("Serving static files from %s", settings.static_root)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
