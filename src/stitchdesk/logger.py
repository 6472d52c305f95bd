from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path


def setup_logger(level: str = "INFO", log_dir: str | Path | None = "data/logs") -> logging.Logger:
    """
    Configure the ``stitchdesk`` logger once per process.

    Console output always; a daily-rotating file under ``log_dir`` unless it is None.
    Module loggers (``logging.getLogger(__name__)``) propagate here.
    """
    logger = logging.getLogger("stitchdesk")
    logger.setLevel(level.upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir is not None:
        d = Path(log_dir)
        d.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=d / "stitchdesk.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.info("Logger initialized (level=%s)", level.upper())
    return logger
