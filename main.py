import os
import sys

from smtp_bridge.config import load_settings
from smtp_bridge.errors import ConfigError, TransportError
from smtp_bridge.logger import configure_logging, get_logger
from smtp_bridge.server import run_server

# Configure logging level from environment
configure_logging(os.getenv("LOG_LEVEL", "INFO"))

logger = get_logger("smtp_bridge")


if __name__ == "__main__":
    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("failed to load configuration from environment: %s", exc)
        sys.exit(1)
    try:
        run_server(settings)
    except TransportError as exc:
        logger.error("%s", exc)
        sys.exit(1)
