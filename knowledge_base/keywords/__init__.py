"""
Keyword indexing and ranking.

Components:
- tokenizer: text → deduplicated, bounded list of index terms
- index_builder: extracted text + metadata → IndexedRecord
- retriever: ILIKE patterns for the record store's substring filter
- scorer: word-boundary occurrence scoring and top-K ranking

Two-phase design: the record store does a blunt substring match
(ILIKE '%token%'), exact relevance is computed locally on word boundaries.
No inverted index: every query re-scans the candidate set.
"""

from .tokenizer import STOPWORDS, MAX_TOKENS, tokenize, join_keywords, split_keywords
from .index_builder import MAX_TEXT_CHARS, build_index_record
from .retriever import CANDIDATE_LIMIT, build_like_patterns
from .scorer import SNIPPET_CHARS, rank_candidates, rank_matches, score_record

__all__ = [
    "STOPWORDS",
    "MAX_TOKENS",
    "MAX_TEXT_CHARS",
    "CANDIDATE_LIMIT",
    "SNIPPET_CHARS",
    "tokenize",
    "join_keywords",
    "split_keywords",
    "build_index_record",
    "build_like_patterns",
    "rank_candidates",
    "rank_matches",
    "score_record",
]
