"""
Occurrence scorer and ranker.

Formula:
    score(doc) = Σ count of word-boundary matches of token in haystack(doc)

Where:
    haystack(doc) = lowercase(text + " " + keyword string + " " + source name)

Unlike the retriever's substring filter, matching here is exact on word
boundaries ("tree" does not match "trees"), so candidates the retriever
admitted by accident score 0 and are dropped.

Ranking is a stable sort on score (descending): ties keep retrieval order.
"""

import re
from typing import List, Sequence, Tuple

from ..models import DocumentRecord, ScoredMatch

# Snippet cap (prefix of the stored text, not a window around the match)
SNIPPET_CHARS = 8000


def build_haystack(record: DocumentRecord) -> str:
    """Lowercased text the scorer counts occurrences in"""
    return " ".join([
        record.answer_text or "",
        record.question_keywords or "",
        record.source_name or "",
    ]).lower()


def count_occurrences(token: str, haystack: str) -> int:
    """Count word-boundary occurrences of token in haystack"""
    if not token:
        return 0
    # ASCII word boundaries, consistent with the tokenizer's [a-z0-9] alphabet
    return len(re.findall(rf"\b{re.escape(token)}\b", haystack, flags=re.ASCII))


def score_record(record: DocumentRecord, query_tokens: Sequence[str]) -> int:
    """
    Compute relevance score for one document.

    Example:
        >>> record = DocumentRecord(id=1, answer_text="Balanced trees", question_keywords="balanced,trees")
        >>> score_record(record, ["balanced", "tree"])
        2
    """
    haystack = build_haystack(record)
    return sum(count_occurrences(token, haystack) for token in query_tokens)


def rank_candidates(
    candidates: Sequence[DocumentRecord],
    query_tokens: Sequence[str],
) -> List[Tuple[DocumentRecord, int]]:
    """Score candidates, drop zero scores, sort by score descending (stable)"""
    if not query_tokens:
        return []

    scored = []
    for record in candidates:
        score = score_record(record, query_tokens)
        if score > 0:
            scored.append((record, score))

    # sorted() is stable: equal scores keep retrieval order
    return sorted(scored, key=lambda item: item[1], reverse=True)


def rank_matches(
    candidates: Sequence[DocumentRecord],
    query_tokens: Sequence[str],
    top_k: int,
    snippet_chars: int = SNIPPET_CHARS,
) -> List[ScoredMatch]:
    """
    Score, rank and truncate candidates into response matches.

    Args:
        candidates: Records admitted by the retriever (in retrieval order)
        query_tokens: Tokenized question
        top_k: Maximum number of matches
        snippet_chars: Snippet length (prefix of stored text)

    Returns:
        At most top_k matches, highest score first, all with score > 0
    """
    if top_k <= 0:
        return []

    ranked = rank_candidates(candidates, query_tokens)[:top_k]

    return [
        ScoredMatch(
            score=score,
            id=record.id,
            snippet=(record.answer_text or "")[:snippet_chars],
            lecturer=record.lecturer_name,
            source=record.source_document,
            filename=record.filename,
            file_url=record.file_url,
        )
        for record, score in ranked
    ]
