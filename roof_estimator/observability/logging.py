import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars

from roof_estimator.config import settings

SECRET_KEYS = {"key", "api_key", "token", "authorization", "crm_api_token"}


def redact_secrets(logger, method_name, event_dict):
    for name in SECRET_KEYS.intersection(event_dict):
        event_dict[name] = "***"
    return event_dict


def configure_logging() -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=str(settings.log_level).upper(),
    )
    # request lines carry the maps API key in the query string
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            merge_contextvars,
            redact_secrets,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def log():
    return structlog.get_logger()
