"""
Logging utilities for crawldown.

Component loggers live under the ``crawldown`` hierarchy and are rendered by
rich; user-facing status lines go straight to the shared console.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


# Shared by the log handler and the status helpers so their output interleaves
console = Console()

_loggers: dict = {}

ROOT_LOGGER = "crawldown"

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str = ROOT_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the handlers of a logger, replacing any it already has.

    Calling this once for the root ``crawldown`` logger configures every
    component logger returned by get_logger().

    Args:
        name: Logger name
        level: Threshold for the logger and its handlers
        log_file: Also append plain-text records to this file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    logger.addHandler(_console_handler(level))
    if log_file:
        logger.addHandler(_file_handler(log_file, level))

    _loggers[name] = logger
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a component logger, e.g. ``get_logger("crawler")``.

    Names outside the ``crawldown`` hierarchy are moved under it.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return _loggers.setdefault(name, logging.getLogger(name))


def print_status(message: str, style: str = "bold blue") -> None:
    """
    Print a styled line to the console.

    The message is printed literally; rich markup in it is not interpreted.

    Args:
        message: Text to print
        style: Rich style applied to the whole line
    """
    console.print(f"[{style}]{escape(message)}[/{style}]", highlight=False)


def print_error(message: str) -> None:
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    print_status(f"✅ {message}", "bold green")


def print_info(message: str) -> None:
    print_status(f"ℹ️ {message}", "bold cyan")
