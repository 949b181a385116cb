from __future__ import annotations

import logging

LOGGER_NAME = "respite_client"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool) -> logging.Logger:
    """Attach a stderr handler to the ``respite_client`` logger namespace."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    # the wire dump below is ours; httpx stays quiet unless asked
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


def enable_request_logging() -> None:
    """Let the per-call request line through while the diagnostic toggle is on."""
    logger = logging.getLogger(f"{LOGGER_NAME}.client")
    if logger.getEffectiveLevel() > logging.DEBUG:
        logger.setLevel(logging.DEBUG)
