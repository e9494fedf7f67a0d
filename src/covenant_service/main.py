from __future__ import annotations

import logging

import uvicorn

from .config import CovenantConfig
from .server import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    """
    Точка входа HTTP-процесса covenant-service.
    """
    config = CovenantConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting covenant-service on %s:%s", config.host, config.port)
    uvicorn.run(
        create_app(config=config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
