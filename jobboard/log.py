import logging

from flask import Flask
from flask.logging import default_handler


def configure_logging(app: Flask) -> logging.Logger:
    """Route the ``jobboard.*`` loggers through Flask's handler at ``LOG_LEVEL``."""
    logger = logging.getLogger("jobboard")
    logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))
    if default_handler not in logger.handlers:
        logger.addHandler(default_handler)
    return logger
