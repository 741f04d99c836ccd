"""
Question answering over the keyword index

Query path:
1. Tokenize the question (same tokenizer as ingestion)
2. Fetch candidates from the record store (substring filter)
3. Re-score candidates on word boundaries, rank, keep top_k
"""

import logging
from typing import Any, List

from .database import KnowledgeBaseDB
from .keywords import CANDIDATE_LIMIT, SNIPPET_CHARS, rank_matches, tokenize
from .models import ScoredMatch

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 2
MAX_TOP_K = 50


def normalize_top_k(value: Any, default: int = DEFAULT_TOP_K, maximum: int = MAX_TOP_K) -> int:
    """
    Coerce a caller-supplied top_k into [1, maximum]

    Missing, non-integer or non-positive values fall back to default.

    >>> normalize_top_k(None)
    2
    >>> normalize_top_k("5")
    5
    >>> normalize_top_k(0)
    2
    >>> normalize_top_k(500)
    50
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float):
        if not value.is_integer():
            return default
        value = int(value)
    try:
        top_k = int(value)
    except (TypeError, ValueError):
        return default
    if top_k <= 0:
        return default
    return min(top_k, maximum)


class SearchService:
    """Stateless query engine over the record store"""

    def __init__(
        self,
        db: KnowledgeBaseDB,
        default_top_k: int = DEFAULT_TOP_K,
        max_top_k: int = MAX_TOP_K,
        candidate_limit: int = CANDIDATE_LIMIT,
        snippet_chars: int = SNIPPET_CHARS,
    ):
        self.db = db
        self.default_top_k = default_top_k
        self.max_top_k = max_top_k
        self.candidate_limit = candidate_limit
        self.snippet_chars = snippet_chars

    async def ask(self, question: str, top_k: Any = None) -> List[ScoredMatch]:
        """
        Answer a question with the best-matching documents

        Args:
            question: Natural-language question
            top_k: Requested number of matches (normalized, see normalize_top_k)

        Returns:
            Ranked matches; empty when the question has no usable tokens

        Raises:
            SearchError: Record store query failed
        """
        query_tokens = tokenize(question)
        if not query_tokens:
            logger.debug("Question has no index tokens, returning no matches")
            return []

        k = normalize_top_k(top_k, default=self.default_top_k, maximum=self.max_top_k)

        candidates = await self.db.search_candidates(query_tokens, limit=self.candidate_limit)
        matches = rank_matches(candidates, query_tokens, k, snippet_chars=self.snippet_chars)

        logger.info(
            f"Query tokens={query_tokens[:10]}{'...' if len(query_tokens) > 10 else ''}: "
            f"{len(candidates)} candidates -> {len(matches)} matches"
        )
        return matches
