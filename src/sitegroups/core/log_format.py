"""Console logging setup."""

import logging

# Between INFO (20) and WARNING (30)
SUCCESS = 25

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(SUCCESS, "SUCCESS")


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """Log a message at the SUCCESS level."""
    logger.log(SUCCESS, message, *args)


def configure_logging(verbose: bool = False) -> None:
    """Configure console logging for CLI scripts.

    Args:
        verbose: Log DEBUG messages too
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    # Silence verbose HTTP request logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("azure.identity").setLevel(logging.WARNING)
    logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(
        logging.WARNING
    )
