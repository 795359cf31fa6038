"""Logging configuration for bem-examples."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    verbosity: int = 1,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Set up logging with Rich formatting.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3=DEBUG+locals).
        log_file: Optional path to log file.

    Returns:
        Configured logger instance.
    """
    level_map = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
        3: logging.DEBUG,
    }
    level = level_map.get(verbosity, logging.INFO)

    logger = logging.getLogger("bem_examples")
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 3,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )
        logger.addHandler(file_handler)

    return logger


def log_warning_action(logger: logging.Logger, action: str, path: str, message: str) -> None:
    """Log a recoverable problem tied to a source file.

    Produces ``[action] path: message`` so the offending file can be found
    from the build log alone.
    """
    logger.warning(f"[{action}] {path}: {message}")
