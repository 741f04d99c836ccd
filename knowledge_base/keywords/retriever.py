"""
Candidate retrieval patterns - coarse substring filter ahead of scoring.

A document is a candidate if ANY query token appears as a case-insensitive
substring of its keyword string, text, source label or filename. This is a
substring test, not a word-boundary test: query "cat" admits a document
whose only related token is "category". The scorer re-checks with word
boundaries and drops those false positives.

The test itself runs in the record store (KnowledgeBaseDB.search_candidates,
ILIKE '%token%'); this module builds its patterns.
"""

from typing import List, Sequence

# Upper bound on candidates handed to the scorer
CANDIDATE_LIMIT = 2000

# Characters with special meaning inside a LIKE pattern
_LIKE_SPECIAL = ('%', '_', '\\')


def build_like_patterns(query_tokens: Sequence[str]) -> List[str]:
    """
    Build one ILIKE pattern per query token.

    >>> build_like_patterns(["balanced", "tree"])
    ['%balanced%', '%tree%']
    """
    patterns = []
    for token in query_tokens:
        safe = token
        for ch in _LIKE_SPECIAL:
            safe = safe.replace(ch, '')
        if safe:
            patterns.append(f"%{safe}%")
    return patterns
