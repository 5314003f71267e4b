"""
Logging configuration for the water-balance pipeline.

Console output at the requested level, plus an optional detailed log file.
"""

import logging
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str = "flux_budyko",
    log_file: Optional[str] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Set up the package logger with a console handler and optional file handler.

    Parameters
    ----------
    name : str, default="flux_budyko"
        Logger name; module loggers under it inherit the handlers.
    log_file : str or Path, optional
        Path to log file, or None for console only.
    log_level : str, default="INFO"
        DEBUG, INFO, WARNING, ERROR or CRITICAL.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    return logger
