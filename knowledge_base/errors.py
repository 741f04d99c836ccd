"""
Error taxonomy for ingestion and search.

- ExtractionError: recoverable, extraction falls back to empty text
- StorageUploadError: fatal for that ingestion (document not indexed)
- StorageDownloadError: fatal for that backfill item only
- RecordInsertError: strict on the request path, logged and skipped on backfill
- SearchError: record store query failed while answering a question
"""


class KnowledgeBaseError(Exception):
    """Base class for all knowledge base errors"""


class ExtractionError(KnowledgeBaseError):
    """Text could not be extracted from a document"""


class StorageUploadError(KnowledgeBaseError):
    """Original file could not be stored in the document bucket"""


class StorageDownloadError(KnowledgeBaseError):
    """Existing bucket file could not be downloaded"""


class RecordInsertError(KnowledgeBaseError):
    """Index record could not be persisted"""


class SearchError(KnowledgeBaseError):
    """Candidate query against the record store failed"""
