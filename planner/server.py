"""Entry point for serving the Project Planner via uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from .config import load_config
from .main import create_app


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main() -> None:
    config = load_config()
    _setup_logging(config.log_level)
    app = create_app(config)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
