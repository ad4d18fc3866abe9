import logging
import logging.handlers
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from purchase_planning.config import config

def log_file_stem(name):
    """File name of a logger: the last part of a dotted module name."""
    return name.rsplit('.', 1)[-1] or 'app'

class Logger:
    """Logging manager for the Purchase Planning System.

    Every named logger writes to its own rotating file in the configured
    directory (``purchase_planning.services.planning_service`` writes to
    ``planning_service.log``) and, when enabled, to the console.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        settings = config.log_config
        self._level = getattr(logging, str(settings['level']).upper(), logging.INFO)
        self._formatter = logging.Formatter(settings['format'])
        self._console = settings['console_output']
        self._max_bytes = settings['max_size_mb'] * 1024 * 1024
        self._backup_count = settings['backup_count']

        self._log_dir = Path(settings['directory'])
        self._log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(self._level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        if self._console:
            root_logger.addHandler(self._console_handler())

        self._app_logger = self.get_logger('app')
        self._initialized = True

    def _console_handler(self):
        handler = logging.StreamHandler()
        handler.setFormatter(self._formatter)
        return handler

    def _file_handler(self, name):
        handler = logging.handlers.RotatingFileHandler(
            self._log_dir / f"{log_file_stem(name)}.log",
            maxBytes=self._max_bytes,
            backupCount=self._backup_count
        )
        handler.setFormatter(self._formatter)
        return handler

    def get_logger(self, name):
        """Get a configured logger.

        Args:
            name: Logger name, usually ``__name__``

        Returns:
            logging.Logger writing to its own file
        """
        if name in self._loggers:
            return self._loggers[name]

        log = logging.getLogger(name)
        log.setLevel(self._level)
        for handler in log.handlers[:]:
            log.removeHandler(handler)

        log.addHandler(self._file_handler(name))
        if self._console:
            log.addHandler(self._console_handler())

        # Root already has a console handler
        log.propagate = False

        self._loggers[name] = log
        return log

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with its stack trace.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(text, exc_info=exception)

    @contextmanager
    def run_log(self, run_name, **info):
        """Log the start, end and duration of a planning run.

        Failures are logged and re-raised.

        Args:
            run_name: Short name of the run (``plan``, ``cash``...)
            **info: Parameters worth recording with the start line
        """
        run_logger = self.get_logger('runs')
        started = datetime.now()

        if info:
            details = ', '.join(f"{key}={value}" for key, value in info.items())
            run_logger.info(f"Starting {run_name} ({details})")
        else:
            run_logger.info(f"Starting {run_name}")

        try:
            yield run_logger
        except Exception as e:
            run_logger.error(f"Failed {run_name} after {datetime.now() - started}: {e}")
            raise

        run_logger.info(f"Completed {run_name} in {datetime.now() - started}")

    @property
    def app_logger(self):
        return self._app_logger

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
