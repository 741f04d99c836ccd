"""Utility functions for the knowledge base"""

import re
import secrets
import time
from typing import Optional

_WHITESPACE = re.compile(r'\s+')


def make_storage_key(filename: str, now_ms: Optional[int] = None, nonce: Optional[str] = None) -> str:
    """
    Build the bucket object name for a fresh upload

    Args:
        filename: Original filename
        now_ms: Epoch milliseconds (default: current time)
        nonce: Random hex tag (default: 8 fresh hex chars); keeps same-name
            uploads within one millisecond from overwriting each other

    Returns:
        "{epoch_ms}_{nonce}_{filename with whitespace runs replaced by _}"

    Examples:
        >>> make_storage_key("week 2 notes.pdf", now_ms=1718000000000, nonce="3fa2c9d1")
        '1718000000000_3fa2c9d1_week_2_notes.pdf'
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if nonce is None:
        nonce = secrets.token_hex(4)
    safe_name = _WHITESPACE.sub('_', (filename or "").strip()) or "upload"
    return f"{now_ms}_{nonce}_{safe_name}"
