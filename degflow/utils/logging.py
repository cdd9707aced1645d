"""
Logging utilities for DegFlow

Every DegFlow module logs under the ``degflow`` namespace; ``setup_logging``
installs a colored console handler (and optionally a plain file handler) on
the root logger so pipeline steps, loaders and renderers share one stream.
"""

import functools
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Union

import colorlog

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Plotting and enrichment backends that flood DEBUG output
NOISY_LOGGERS = ("matplotlib", "matplotlib.font_manager", "fontTools", "PIL", "gseapy")


def _console_handler(format_string: str, use_colors: bool) -> logging.Handler:
    if use_colors:
        handler = colorlog.StreamHandler(sys.stdout)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s" + format_string,
                datefmt=DATE_FORMAT,
                log_colors=LOG_COLORS,
            )
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(format_string, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Set up logging for DegFlow

    Args:
        level: Logging level (INFO, DEBUG, etc.)
        log_file: Optional file that receives an uncolored copy of the log
        format_string: Custom format string
        use_colors: Whether to use colored output for console

    Returns:
        The ``degflow`` package logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    format_string = format_string or DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handlers = [_console_handler(format_string, use_colors)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(logging.Formatter(format_string, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    degflow_logger = logging.getLogger("degflow")
    degflow_logger.setLevel(level)

    return degflow_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``degflow`` namespace"""
    if name == "degflow" or name.startswith("degflow."):
        return logging.getLogger(name)
    return logging.getLogger(f"degflow.{name}")


def log_execution_time(func):
    """Log how long a pipeline step took, or how long it ran before failing"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.time()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"{func.__name__} failed after {time.time() - start_time:.2f} seconds: {e}"
            )
            raise

        logger.info(f"{func.__name__} completed in {time.time() - start_time:.2f} seconds")
        return result

    return wrapper
