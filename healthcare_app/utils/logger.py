import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from healthcare_app.config import get_settings

LOGGER_NAME = "healthcare_api"
MAX_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

_console_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
_file_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def _rotating(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
    handler.setLevel(level)
    handler.setFormatter(_file_format)
    return handler


def configure_logging() -> logging.Logger:
    """Attach console, app.log and errors.log handlers to the app logger once."""
    settings = get_settings()
    root = logging.getLogger(LOGGER_NAME)
    if root.handlers:
        return root

    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO
    root.setLevel(level)

    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(_console_format)
    root.addHandler(console)
    root.addHandler(_rotating(logs_dir / "app.log", logging.INFO))
    root.addHandler(_rotating(logs_dir / "errors.log", logging.ERROR))
    return root


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance. If name is provided, returns a child logger."""
    root = configure_logging()
    if name:
        return root.getChild(name)
    return root
