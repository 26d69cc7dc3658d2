"""
Entry point — start the MindEase focus engine.

Usage:
    python -m mindease.main
    uvicorn mindease.api.app:app --host 127.0.0.1 --port 8765 --reload
"""

import logging

import uvicorn

from .config import config
from .log import setup_logging


def main():
    setup_logging(logging.getLevelName(config.log_level.upper()))
    uvicorn.run(
        "mindease.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
