'''
Application logger, imported everywhere as `log`.
'''
import logging
import sys

from .config import settings

LOG_FORMAT = '%(asctime)s - %(module)s - %(levelname)s\n - %(message)s'


def setup_logger(name: str = 'peer-tutoring') -> logging.Logger:
    """
    Builds the stdout logger at the configured LOG_LEVEL.
    SQL statements go through SQLAlchemy's own logger, enabled by DB_ECHO.
    """
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    # don't duplicate lines through the root logger (uvicorn configures it)
    logger.propagate = False
    return logger


log = setup_logger()
