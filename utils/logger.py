"""
Logging configuration for the gateway.
"""
import logging
import sys

from config import Config


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def resolve_level(level_name: str) -> int:
    """Map a level name such as "debug" to a logging level, INFO when unknown."""
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Set up a logger writing to stdout.

    Args:
        name: Logger name
        level: Logging level, taken from Config.LOG_LEVEL when omitted

    Returns:
        Configured logger instance
    """
    if level is None:
        level = resolve_level(Config.LOG_LEVEL)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger.addHandler(handler)
    return logger


def preview(text: str, limit: int = 50) -> str:
    """Shorten long payloads such as base64 images for log lines."""
    return text if len(text) <= limit else text[:limit] + "..."


app_logger = setup_logger("ollama_gateway")
