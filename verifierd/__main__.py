"""Entry point for running the verifierd daemon.

This module provides the entry point for starting the daemon.
"""

import logging
import sys

import uvicorn

from verifier_library.config.loader import load_config

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the verifierd daemon.

    Loads configuration and starts the uvicorn server.
    """
    try:
        config = load_config()

        uvicorn.run(
            "verifierd.main:app",
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            workers=config.workers,
        )

    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Failed to start daemon: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
