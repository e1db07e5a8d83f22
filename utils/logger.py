"""Logging configuration using loguru."""

import sys
from pathlib import Path
from loguru import logger


# Records bound with logger.bind(operation=...) show the remote operation name
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[operation]: <21} | "
    "{name}:{function}:{line} | {message}"
)


def setup_logger(log_level: str = "INFO", log_dir: str = "logs") -> None:
    """
    Configure loguru logger.

    Console output goes to stderr; errors and the full log are also written
    to rotating files under `log_dir`.
    """

    # Remove default handler
    logger.remove()
    logger.configure(extra={"operation": "-"})

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>{extra[operation]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=log_level,
        colorize=True,
    )

    log_path = Path(log_dir)

    # Errors only
    logger.add(
        log_path / "error.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )

    logger.add(
        log_path / "app.log",
        format=FILE_FORMAT,
        level=log_level,
        rotation="50 MB",
        retention="3 days",
        compression="zip",
    )

    logger.info(f"Logger initialized with level: {log_level}, files under {log_path.resolve()}")


__all__ = ["setup_logger", "logger"]
