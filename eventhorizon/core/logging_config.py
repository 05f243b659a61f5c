"""Logging configuration for the application."""

import logging
import sys


def setup_logging(level: str = "INFO"):
    """Configure the root logger once; repeated calls are no-ops."""
    root_logger = logging.getLogger()
    if any(getattr(h, "_eventhorizon", False) for h in root_logger.handlers):
        return

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._eventhorizon = True  # type: ignore[attr-defined]

    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)

    # Noisy third-party loggers
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('celery').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
