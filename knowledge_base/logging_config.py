"""Logging setup: brief console output + per-session rotating log file"""
import glob
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

KEEP_SESSION_LOGS = 5
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB

# Third-party loggers that flood the console at INFO
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "urllib3", "google.auth", "asyncio")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _prune_session_logs(log_path: Path, keep: int):
    """Delete old session logs so that `keep` remain after the new one is created"""
    pattern = str(log_path.parent / f"{log_path.stem}_*.log")
    existing = sorted(glob.glob(pattern), reverse=True)  # Newest first
    for old_log in existing[keep - 1:]:
        try:
            Path(old_log).unlink()
        except OSError:
            pass  # Locked or already gone


def setup_logging(
    log_file: str = "logs/knowledge-base.log",
    console_level: Union[int, str] = logging.INFO,
    file_level: Union[int, str] = logging.DEBUG,
) -> Path:
    """
    Configure root logging.

    - Console: `LEVEL: message`, at console_level
    - File: timestamped session file (`<stem>_YYYYmmdd_HHMMSS.log`), at
      file_level, rotated at 10MB; only the last 5 sessions are kept

    Args:
        log_file: Base log path (relative to working directory)
        console_level: Console level (int or name, e.g. "INFO")
        file_level: File level (int or name)

    Returns:
        Path of this session's log file
    """
    console_level = _resolve_level(console_level)
    file_level = _resolve_level(file_level)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _prune_session_logs(log_path, KEEP_SESSION_LOGS)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Filtering happens in handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=MAX_LOG_BYTES,
        backupCount=3,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log} ({logging.getLevelName(file_level)})"
    )
    return session_log
