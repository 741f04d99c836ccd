"""Unit test configuration - mocked collaborators for isolated testing"""

from unittest.mock import AsyncMock, Mock

import pytest

from knowledge_base.extraction import TextExtractor
from knowledge_base.keywords import build_index_record
from knowledge_base.models import DocumentRecord, IndexedRecord


def make_record(record_id: int, text: str = "", filename: str = "doc.txt", **fields) -> DocumentRecord:
    """Build a persisted record the way ingestion would produce it"""
    indexed = build_index_record(text, filename, **fields)
    return DocumentRecord(id=record_id, **indexed.model_dump())


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def trees_record():
    """Document from the binary search trees ingestion scenario"""
    return make_record(
        1,
        "Binary search trees are balanced trees used for search",
        "notes.txt",
    )


@pytest.fixture
def mock_db():
    """Record store double: insert echoes the record back with an id"""
    db = Mock()
    counter = {"next_id": 0}

    async def insert(record: IndexedRecord) -> DocumentRecord:
        counter["next_id"] += 1
        return DocumentRecord(id=counter["next_id"], **record.model_dump())

    db.insert_record = AsyncMock(side_effect=insert)
    db.search_candidates = AsyncMock(return_value=[])
    db.list_storage_keys = AsyncMock(return_value=set())
    db.count_records = AsyncMock(return_value=0)
    return db


@pytest.fixture
def mock_storage():
    """Bucket double with a deterministic public URL"""
    storage = Mock()
    storage.upload = AsyncMock(side_effect=lambda key, content, content_type=None: key)
    storage.download = AsyncMock(return_value=b"")
    storage.list_files = AsyncMock(return_value=[])
    storage.get_public_url = Mock(side_effect=lambda key: f"https://storage.googleapis.com/test-bucket/{key}")
    return storage


@pytest.fixture
def text_extractor():
    """Extractor that treats every payload as plain text (no libmagic lookup)"""
    return TextExtractor(kind_resolver=lambda filename, content, declared_type: "text")
