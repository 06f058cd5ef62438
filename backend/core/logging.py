import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
import pytz
import traceback

LOCAL_TZ_NAME = os.getenv("TIMEZONE", "Asia/Shanghai")
LOG_DIRECTORY = os.getenv("LOG_DIRECTORY", "logs")

class LocaleFormatter(logging.Formatter):
    """Formatter that renders timestamps in the service's fixed locale."""
    def converter(self, timestamp):
        dt = datetime.fromtimestamp(timestamp, tz=pytz.timezone(LOCAL_TZ_NAME))
        return dt.timetuple()

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=pytz.timezone(LOCAL_TZ_NAME))
        if datefmt:
            return dt.strftime(datefmt)
        else:
            return dt.strftime('%Y-%m-%d %H:%M:%S')

def setup_logging():
    """Setup application logging with file rotation and console output."""
    if not os.path.exists(LOG_DIRECTORY):
        os.makedirs(LOG_DIRECTORY)

    log_file_path = os.path.join(LOG_DIRECTORY, "backend.log")
    request_log_path = os.path.join(LOG_DIRECTORY, "requests.log")

    main_formatter = LocaleFormatter(
        '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s'
    )

    # Simplified formatter for request logs
    request_formatter = LocaleFormatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )

    # Configure root logger
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    # Remove default handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    file_handler = RotatingFileHandler(
        log_file_path,
        maxBytes=1*1024*1024,  # 1 MB
        backupCount=3
    )
    file_handler.setFormatter(main_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(main_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Separate request logger, file only
    request_logger = logging.getLogger('requests')
    request_logger.setLevel(logging.INFO)
    for handler in request_logger.handlers[:]:
        request_logger.removeHandler(handler)

    request_file_handler = RotatingFileHandler(
        request_log_path,
        maxBytes=1*1024*1024,  # 1 MB
        backupCount=3
    )
    request_file_handler.setFormatter(request_formatter)
    request_logger.addHandler(request_file_handler)

    # Prevent request logs from propagating to root logger
    request_logger.propagate = False

    return logger

def get_request_logger():
    """Get the request logger instance."""
    return logging.getLogger('requests')

def log_exception(logger_name: str = None):
    """Context manager to log exceptions with full traceback."""
    class ExceptionLogger:
        def __init__(self, logger_name: str):
            self.logger = logging.getLogger(logger_name or __name__)

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_type is not None:
                self.logger.error(
                    f"Exception occurred: {exc_type.__name__}: {exc_val}\n"
                    f"Traceback:\n{traceback.format_exc()}"
                )
            return False  # Don't suppress the exception

    return ExceptionLogger(logger_name)

# Shared module logger; handlers are installed by setup_logging() in main.py
logger = logging.getLogger("yaobao")
request_logger = get_request_logger()
