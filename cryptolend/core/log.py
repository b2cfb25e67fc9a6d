import logging.config
from typing import Optional

from cryptolend.core.config import Settings, get_settings


def build_logging_config(settings: Settings) -> dict:
    """dictConfig for the engine's loggers"""
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'verbose': {
                'format': '{levelname} {asctime} {name} {process:d} {thread:d} {message}',
                'style': '{',
            },
            'simple': {
                'format': '{levelname} {asctime} {name} {message}',
                'style': '{',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'verbose' if settings.DEBUG else 'simple',
            },
        },
        'loggers': {
            'cryptolend': {
                'handlers': ['console'],
                'level': settings.LOG_LEVEL,
                'propagate': False,
            },
            'sqlalchemy.engine': {
                'handlers': ['console'],
                'level': 'INFO' if settings.DEBUG else 'WARNING',
                'propagate': False,
            },
        },
    }


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install console logging for the cryptolend package"""
    logging.config.dictConfig(build_logging_config(settings or get_settings()))
