import logging
import sys

from loguru import logger

def configure_logging(level: str = "WARNING") -> None:

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level}: {message}</level>"
    )

    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.dialects').setLevel(logging.WARNING)
