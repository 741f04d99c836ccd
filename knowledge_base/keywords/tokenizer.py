"""
Tokenizer for keyword indexing and query matching.

Tokenization pipeline:
1. Lowercase conversion
2. Replace everything outside [a-z0-9] and whitespace with a space
   ("cost-effective" → "cost effective")
3. Split on whitespace runs
4. Drop short tokens (length <= 2) and stopwords
5. Deduplicate, keeping first occurrence order
6. Cap the result at MAX_TOKENS

The same function is applied to document text at ingestion time and to the
question at query time, so both sides always agree on what a token is.
No stemming: "tree" and "trees" are different tokens.
"""

import re
from typing import Iterable, List, Optional

# Closed list of English function words, never configurable at runtime
STOPWORDS = frozenset([
    'the', 'is', 'and', 'a', 'an', 'of', 'to', 'in', 'for', 'on', 'by',
    'with', 'that', 'this', 'it', 'are', 'as', 'be', 'or',
    'from', 'at', 'which', 'we', 'you', 'your', 'our', 'their',
    'has', 'have', 'was', 'were', 'but', 'not',
    # question words (queries are phrased as questions)
    'what', 'when', 'where', 'who', 'why', 'how'
])

# Upper bound on tokens per document / per query (bounds worst-case query cost)
MAX_TOKENS = 2000

MIN_TOKEN_LENGTH = 3

KEYWORD_SEPARATOR = ","

_NON_ALNUM = re.compile(r'[^a-z0-9\s]')


def tokenize(text: Optional[str], max_tokens: int = MAX_TOKENS) -> List[str]:
    """
    Tokenize text into a deduplicated, order-stable list of index terms.

    Args:
        text: Input text (None and "" are accepted)
        max_tokens: Maximum number of tokens to return

    Returns:
        List of lowercase tokens, first occurrence order, no duplicates

    Examples:
        >>> tokenize("Cost-effective binary search, binary trees!")
        ['cost', 'effective', 'binary', 'search', 'trees']

        >>> tokenize("what is a balanced tree")
        ['balanced', 'tree']

        >>> tokenize(None)
        []
    """
    if not text:
        return []

    # Lowercase, then punctuation becomes whitespace (never glues words together)
    normalized = _NON_ALNUM.sub(' ', str(text).lower())

    tokens = []
    seen = set()
    for word in normalized.split():
        if len(word) < MIN_TOKEN_LENGTH or word in STOPWORDS or word in seen:
            continue
        seen.add(word)
        tokens.append(word)
        if len(tokens) >= max_tokens:
            break

    return tokens


def join_keywords(tokens: Iterable[str]) -> str:
    """Serialize tokens into the stored comma-joined keyword string"""
    return KEYWORD_SEPARATOR.join(tokens)


def split_keywords(keyword_string: Optional[str]) -> List[str]:
    """
    Parse a stored keyword string back into tokens.

    >>> split_keywords("binary,search,trees")
    ['binary', 'search', 'trees']
    >>> split_keywords("")
    []
    """
    if not keyword_string:
        return []
    return [k for k in keyword_string.split(KEYWORD_SEPARATOR) if k]
