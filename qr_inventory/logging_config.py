"""
Logging configuration for the QR Inventory service.

``setup_logging`` attaches a console handler to the root logger once, so
repeated calls from ``create_app`` (as happens in tests) are harmless.
"""
import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a timestamped console handler.

    Args:
        level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``), case insensitive.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
