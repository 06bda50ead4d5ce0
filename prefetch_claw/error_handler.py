import logging
import sys
from typing import Optional, TextIO

from .config import DEFAULT_LOG_LEVEL, LOG_DATE_FORMAT, LOG_FORMAT, LOGGER_NAME
from .errors import PrefetchError


class ErrorHandler:
    """
    Centralized error reporting and logging setup for the command-line tools.
    Library modules only log through module loggers; handlers are attached here.
    """

    def __init__(self, logger_name: str = LOGGER_NAME):
        """
        Initialize the error handler with a logger.

        Args:
            logger_name: Name to use for the logger
        """
        self.logger = logging.getLogger(logger_name)

    def setup_logging(self, log_level: int = DEFAULT_LOG_LEVEL, log_file: Optional[str] = None,
                      stream: Optional[TextIO] = None):
        """
        Configure logging settings.

        Args:
            log_level: Logging level (e.g., logging.INFO, logging.DEBUG)
            log_file: Optional file to write logs to
            stream: Console stream for log records (defaults to stdout)
        """
        # Clear any existing handlers
        self.logger.handlers = []
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            try:
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
            except OSError as e:
                self.logger.error(f"Failed to set up file logging: {str(e)}")
            else:
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

    def handle_error(self,
                     exception: Optional[Exception] = None,
                     message: str = "An error occurred",
                     log_level: int = logging.ERROR,
                     raise_exception: bool = True) -> bool:
        """
        Handle an error with consistent logging and optional re-raising.

        Decode errors are logged with their details (offset, original error);
        anything else is logged with its traceback.

        Args:
            exception: The exception that was caught (if any)
            message: Custom error message
            log_level: Logging level for the error
            raise_exception: Whether to re-raise the exception

        Returns:
            bool: Always returns False to allow for early returns
        """
        full_message = message
        exc_info = False

        if isinstance(exception, PrefetchError):
            full_message = f"{message}: [{exception.kind.value}] {exception.details}"
        elif exception is not None:
            full_message = f"{message}: {str(exception)}"
            exc_info = sys.exc_info()[0] is not None

        self.logger.log(log_level, full_message, exc_info=exc_info)

        if raise_exception and exception is not None:
            raise exception

        return False
