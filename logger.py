import json
import logging
import os

import config

# ANSI escape sequences for colors
LOG_COLORS = {
    'DEBUG': "\033[94m",
    'INFO': "\033[92m",
    'WARNING': "\033[93m",
    'ERROR': "\033[91m",
    'CRITICAL': "\033[95m",
    'RESET': "\033[0m"
}


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


class ColorFormatter(logging.Formatter):
    def format(self, record):
        log_color = LOG_COLORS.get(record.levelname, LOG_COLORS['RESET'])
        message = super().format(record)
        return f"{log_color}{message}{LOG_COLORS['RESET']}"


class CustomLogger:
    """Console logger with an optional JSON-lines file next to it."""

    def __init__(self, name="music_catalog", level=None, log_dir=None):
        self.__logger = logging.getLogger(name)
        self.__logger.setLevel(level or config.LOG_LEVEL)
        self.__logger.propagate = False

        log_dir = log_dir or config.LOG_DIR

        if not self.__logger.handlers:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(ColorFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            self.__logger.addHandler(stream_handler)

            if log_dir is not None:
                os.makedirs(log_dir, exist_ok=True)
                file_handler = logging.FileHandler(os.path.join(log_dir, f"{name}.json.log"))
                file_handler.setFormatter(JsonFormatter())
                self.__logger.addHandler(file_handler)

    def debug(self, msg):
        self.__logger.debug(msg)

    def log(self, msg):
        self.__logger.info(msg)

    def warning(self, msg):
        self.__logger.warning(msg)

    def error(self, msg):
        self.__logger.error(msg)

    def exception(self, msg):
        self.__logger.exception(msg)
