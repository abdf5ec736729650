import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "CELEBRITY_DRAFT_LOG_LEVEL"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("urllib3", "uvicorn.access")


def setup_logging(log_level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Configure logging for the celebrity draft room.

    The level comes from *log_level*, then $CELEBRITY_DRAFT_LOG_LEVEL, then
    INFO. The file log always records DEBUG.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return  # Already configured

    log_level = (log_level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    log_dir = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger.setLevel(logging.DEBUG)

    # File handler with rotation (5MB max, keep 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "celebrity_draft.log", maxBytes=5 * 1024 * 1024, backupCount=3
    )
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized (level=%s, dir=%s)", log_level, log_dir)
