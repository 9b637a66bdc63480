"""Entrypoint: python -m messaging_service"""
from __future__ import annotations

import logging

import uvicorn

from messaging_service.api.middleware.correlation_id import LOG_FORMAT, install_log_correlation
from messaging_service.config import settings


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)
    install_log_correlation()
    uvicorn.run(
        "messaging_service.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
