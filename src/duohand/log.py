from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, max_size_mb: int = 10, backup_count: int = 3) -> None:
    """Configure root logging for the demo scripts. Library modules only create loggers."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-5s  %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_size_mb * 1024 * 1024, backupCount=backup_count
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)-7s] %(name)-20s | %(message)s", datefmt="%H:%M:%S")
        )
        root.addHandler(file_handler)
