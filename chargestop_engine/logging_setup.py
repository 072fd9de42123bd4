# chargestop_engine/logging_setup.py

from __future__ import annotations
import logging
from pathlib import Path


def setup_logging(log_level: str | int = "INFO", log_file: Path | None = None) -> None:
    """Eenmalige logconfiguratie; dubbele handlers worden overgeslagen."""
    level = (
        log_level
        if isinstance(log_level, int)
        else getattr(logging, str(log_level).upper(), logging.INFO)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    has_stream_handler = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root_logger.handlers
    )
    if not has_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    if log_file is not None:
        log_path = log_file.resolve()
        has_file_handler = any(
            isinstance(h, logging.FileHandler)
            and Path(getattr(h, "baseFilename", "")).resolve() == log_path
            for h in root_logger.handlers
        )
        if not has_file_handler:
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
