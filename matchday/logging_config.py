"""Logging setup for applications that embed the matchday engine.

Engine modules never configure handlers themselves; they log to children of
the 'matchday' logger and leave output to whatever setup_logging() installs.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

ROOT_LOGGER = 'matchday'

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f'Unknown log level: {level}')
    return resolved


def setup_logging(
    log_dir: Optional[Path] = None,
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Install handlers on the 'matchday' logger.

    Replaces any handlers from a previous call, so it is safe to call again
    with different options.

    Args:
        log_dir: Directory for timestamped log files (default: ./logs)
        level: Logging level, as a number or name such as 'DEBUG'
        log_to_file: Write a detailed log file
        log_to_console: Write short messages to the console
        stream: Console stream (default: stdout)

    Returns:
        The configured 'matchday' logger

    Raises:
        ValueError: If level is an unknown name

    Example:
        from matchday.logging_config import setup_logging
        logger = setup_logging(level='DEBUG', log_to_file=False)
        logger.info("Rebuilding rankings")
    """
    level = _resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'matchday_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get an engine logger.

    Short names are placed under the 'matchday' logger, so get_logger('elo')
    and get_logger('matchday.elo') return the same logger.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + '.'):
        name = f'{ROOT_LOGGER}.{name}'
    return logging.getLogger(name)


def log_data_warnings(logger: logging.Logger, warnings: Iterable[str], context: Optional[str] = None) -> int:
    """Log skipped-data warnings one per line; returns how many were logged."""
    count = 0
    for warning in warnings:
        logger.warning(f'{context}: {warning}' if context else warning)
        count += 1
    return count
