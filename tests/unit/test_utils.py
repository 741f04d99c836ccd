"""Unit tests for utility functions"""

import re

from knowledge_base.utils import make_storage_key


class TestStorageKey:
    """Bucket object names for fresh uploads"""

    def test_timestamp_and_nonce_prefix(self):
        key = make_storage_key("notes.pdf", now_ms=1718000000000, nonce="ab12cd34")
        assert key == "1718000000000_ab12cd34_notes.pdf"

    def test_whitespace_replaced(self):
        key = make_storage_key("week 2\tlecture   notes.docx", now_ms=1, nonce="00")
        assert key == "1_00_week_2_lecture_notes.docx"

    def test_surrounding_whitespace_trimmed(self):
        assert make_storage_key("  notes.txt ", now_ms=5, nonce="ff") == "5_ff_notes.txt"

    def test_empty_filename(self):
        assert make_storage_key("", now_ms=7, nonce="ff") == "7_ff_upload"

    def test_current_time_and_random_nonce_by_default(self):
        key = make_storage_key("a b.txt")
        assert re.fullmatch(r"\d{13}_[0-9a-f]{8}_a_b\.txt", key)

    def test_same_name_same_millisecond_gets_distinct_keys(self):
        keys = {make_storage_key("notes.txt", now_ms=1718000000000) for _ in range(20)}
        assert len(keys) == 20
