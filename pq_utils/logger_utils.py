import logging
import sys
from pythonjsonlogger.json import JsonFormatter

from src.infrastructure.config import settings

# Records carry APP_NAME as "service"; level comes from LOG_LEVEL


def get_logger(name: str, log_level: str = settings.LOG_LEVEL):
    logger = logging.getLogger(name)
    logger.setLevel(log_level.upper())
    logger.propagate = False

    formatter = JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(message)s',
        static_fields={"service": settings.APP_NAME},
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger


# Package logger shared by the app, the services and the repositories
logger = get_logger("persona_quiz")
