from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", *, logger_name: str = "workbeat") -> logging.Logger:
    """Attach one console handler to the package logger.

    Safe to call repeatedly (e.g. once per create_app in tests).
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    if not any(getattr(h, "_workbeat_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._workbeat_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)
    return logger
