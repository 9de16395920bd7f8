import logging
import pathlib
import sys
from typing import Optional

import pendulum
from rich.logging import RichHandler
from rich.traceback import install

from core.config import settings

_root_logger = logging.getLogger()


def get_log_path(filename: str, log_dir: Optional[str] = None) -> pathlib.Path:
    path = pathlib.Path(log_dir or settings.LOG_DIR).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path / f"{filename}.log"


def setup_logging_to_file(
    app: str,
    level: int = logging.INFO,
    *,
    logger: logging.Logger = _root_logger,
    timestamp: bool = True,
    log_dir: Optional[str] = None,
) -> pathlib.Path:
    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s.%(funcName)s:%(lineno)d %(message)s"
    )
    if timestamp:
        filename = f"{app}.{pendulum.now():%Y%m%d.%H%M%S.%f}"
    else:
        filename = app
    log_path = get_log_path(filename, log_dir)
    file_handler = logging.FileHandler(log_path)
    file_handler.formatter = formatter
    logger.setLevel(level)
    logger.addHandler(file_handler)
    return log_path


def setup_logging_to_console(
    level: int = logging.INFO,
    *,
    logger: logging.Logger = _root_logger,
    show_locals: bool = False,
) -> Optional[RichHandler]:
    """Log to the terminal through rich. Does nothing when stdout is not a terminal."""
    if not sys.stdout.isatty():
        return None

    install(show_locals=show_locals)
    handler = RichHandler(rich_tracebacks=True, level=level, show_time=True, show_path=False)
    logger.setLevel(level)
    logger.addHandler(handler)
    return handler
