"""
Keyword index builder - turns extracted text + metadata into an index record.

Filename, source label and manual keywords are tokenized together with the
body text, so they participate in retrieval exactly like extracted content.
"""

import logging
from typing import Optional

from ..models import IndexedRecord
from .tokenizer import MAX_TOKENS, join_keywords, tokenize

logger = logging.getLogger(__name__)

# Stored text cap (row-size limit of the record store)
MAX_TEXT_CHARS = 20000


def build_index_record(
    text: Optional[str],
    filename: str,
    lecturer_name: str = "",
    keywords: str = "",
    source_document: str = "",
    uploaded_by: str = "",
    file_url: str = "",
    storage_key: str = "",
    max_text_chars: int = MAX_TEXT_CHARS,
    max_tokens: int = MAX_TOKENS,
) -> IndexedRecord:
    """
    Build the keyword-index record for one document.

    Tokenization runs over the FULL text before truncation, so keywords may
    reference content beyond the stored text window.

    Args:
        text: Extracted document text (None or "" when extraction failed)
        filename: Original filename
        lecturer_name: Attribution label (not scored)
        keywords: Free-text manual keywords
        source_document: Optional source label
        uploaded_by: Uploader label (not scored)
        file_url: Public reference to the original bytes
        storage_key: Object name in the document bucket
        max_text_chars: Stored text cap
        max_tokens: Keyword set cap

    Returns:
        IndexedRecord ready for insertion

    Example:
        >>> record = build_index_record(
        ...     "Binary search trees are balanced trees used for search",
        ...     "notes.txt",
        ... )
        >>> record.question_keywords
        'binary,search,trees,balanced,used,notes,txt'
    """
    text = text or ""
    filename = filename or ""

    tokens = tokenize(
        f"{text} {filename} {source_document or ''} {keywords or ''}",
        max_tokens=max_tokens,
    )

    logger.debug(f"Indexed {filename!r}: {len(tokens)} keywords from {len(text)} chars")
    if len(text) > max_text_chars:
        logger.debug(f"Truncating stored text for {filename!r}: {len(text)} -> {max_text_chars} chars")

    return IndexedRecord(
        question_keywords=join_keywords(tokens),
        answer_text=text[:max_text_chars],
        filename=filename,
        storage_key=storage_key or "",
        file_url=file_url or "",
        uploaded_by=uploaded_by or "",
        lecturer_name=lecturer_name or "",
        source_document=source_document or "",
    )
