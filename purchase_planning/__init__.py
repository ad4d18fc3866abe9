from .config import config
from .logging_setup import logger, get_logger
from .exceptions import (
    PlanningError, ConfigError, DatabaseError, ValidationError,
    ForecastError, PlanError, NotFoundError
)

__all__ = [
    'config',
    'logger',
    'get_logger',
    'PlanningError',
    'ConfigError',
    'DatabaseError',
    'ValidationError',
    'ForecastError',
    'PlanError',
    'NotFoundError'
]
