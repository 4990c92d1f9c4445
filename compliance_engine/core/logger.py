"""Loguru sinks for the compliance engine and its CLI.

Engine modules only ever call ``loguru.logger``; nothing is configured on
import. Embedding services keep their own sinks, the CLI calls
``setup_logger`` once at startup.
"""

import sys
from pathlib import Path

from loguru import logger

from compliance_engine.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    level: str | None = None,
    log_file: str | Path | None = None,
    serialize: bool = False,
) -> None:
    """Replace loguru's default handler with the engine's sinks.

    Args:
        level: Minimum level; falls back to ``settings.log_level``
        log_file: Optional file path, rotated at 10 MB and kept for 7 days
        serialize: Emit JSON records on stderr instead of the colored format
    """
    effective_level = (level or settings.log_level).upper()

    logger.remove()
    if serialize:
        logger.add(sys.stderr, level=effective_level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=effective_level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=effective_level,
            rotation="10 MB",
            retention="7 days",
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"Logger configured: level={effective_level}, file={log_file}, serialize={serialize}")
