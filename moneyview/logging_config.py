import logging
import sys

from moneyview.config import Settings

LOGGER_NAME = "moneyview"


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Safe to call more than once: existing handlers are replaced so that
    repeated app construction (tests, reloads) does not duplicate lines.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    return logger
