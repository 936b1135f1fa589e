"""Logging setup shared by the API and the terminal menu"""

import logging
from pathlib import Path

from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings, console: bool = True) -> None:
    """
    Configure root logging from settings.

    The API logs to the console and optionally mirrors to log_file. The
    terminal menu passes console=False so log lines stay out of its screen;
    it then writes to log_file, or to logs/app.log under the data directory.
    """
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())

    log_file = settings.log_file
    if not log_file and not console:
        log_file = settings.data_path / "logs" / "app.log"

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
