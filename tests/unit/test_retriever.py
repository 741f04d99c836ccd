"""
Unit tests for candidate ILIKE patterns.
"""

from knowledge_base.keywords.retriever import build_like_patterns


class TestLikePatterns:

    def test_one_pattern_per_token(self):
        assert build_like_patterns(["balanced", "tree"]) == ["%balanced%", "%tree%"]

    def test_like_wildcards_stripped(self):
        assert build_like_patterns(["50%_off", "a\\b"]) == ["%50off%", "%ab%"]

    def test_empty(self):
        assert build_like_patterns([]) == []
        assert build_like_patterns(["%", "_"]) == []

    def test_order_preserved(self):
        assert build_like_patterns(["tree", "balanced", "avl"]) == ["%tree%", "%balanced%", "%avl%"]
