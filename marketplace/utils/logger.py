"""Logging setup driven by the ``logging`` config section."""

import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from .config import LoggingConfig, get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def module_levels(default_level: str, overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Build a loguru filter mapping module prefixes to minimum levels.

    The empty key covers every module without an override, so
    ``{"": "INFO", "marketplace.storage": "DEBUG"}`` shows storage debug
    output while the rest of the package stays at INFO.
    """
    levels = {"": default_level.upper()}
    for module, level in (overrides or {}).items():
        levels[module] = level.upper()
    return levels


def setup_logging(
    config: Optional[LoggingConfig] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """Install the stderr sink and, if a file is configured, a rotating file sink.

    Args:
        config: Logging section, read from ``get_config()`` when omitted
        log_level: Overrides ``config.level``
        log_file: Overrides ``config.file``, empty string disables the file sink
    """
    if config is None:
        config = get_config().logging

    level = (log_level or config.level).upper()
    levels = module_levels(level, config.modules)
    serialize = config.format == "json"
    # Sinks accept everything the per-module filter lets through
    threshold = min(logger.level(name).no for name in levels.values())

    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=threshold,
        filter=levels,
        colorize=not serialize,
        serialize=serialize,
    )

    if log_file is None:
        log_file = config.file

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=threshold,
            filter=levels,
            serialize=serialize,
            rotation=config.rotation,
            retention=config.retention,
            compression=config.compression,
        )

    logger.info(f"Logging initialized at {level} level ({config.format})")
