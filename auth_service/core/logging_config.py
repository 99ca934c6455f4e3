"""Process-wide logging setup for the API server and CLI entrypoints."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth_service.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: "Settings") -> None:
    """Configure the root logger once; later calls are no-ops (logging.basicConfig semantics)."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
