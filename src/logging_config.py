import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILENAME = "auction_manager.log"


def setup_logging(
    log_level: str = "WARNING", log_dir: Optional[Path] = None
) -> Optional[Path]:
    """Configure logging for the Auction Manager.

    The log file always records DEBUG (every tick and turn change). The console
    only shows ``log_level`` and above so it does not drown the auction prompt.

    Returns:
        Path of the log file, or None if logging was already configured.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return None  # Already configured

    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    root_logger.setLevel(logging.DEBUG)

    # Rotating file (5MB max, keep 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).info("Logging initialized (console=%s)", log_level)
    return log_file
