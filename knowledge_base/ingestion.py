"""
Ingestion pipeline: original bytes → bucket → extracted text → index record → row

Both entry paths go through IngestionService.ingest():
- FreshUpload: bytes received on /upload, stored in the bucket first
- ExistingBlob: object already in the bucket (startup backfill), downloaded

Failure policy:
- Extraction failure: never fatal, ingest with empty text
- Bucket upload / download failure: fatal for that document
- Record insert failure: raised when strict=True (request path), logged and
  None returned when strict=False (backfill, one bad file must not stop the batch)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .database import KnowledgeBaseDB
from .errors import KnowledgeBaseError, RecordInsertError
from .extraction import TextExtractor
from .keywords import build_index_record
from .models import DocumentRecord
from .storage import DocumentStorage
from .utils import make_storage_key

logger = logging.getLogger(__name__)


@dataclass
class FreshUpload:
    """File bytes received from a client"""
    content: bytes
    filename: str
    content_type: str = ""


@dataclass
class ExistingBlob:
    """Object already present in the document bucket"""
    name: str
    content_type: str = ""


IngestSource = Union[FreshUpload, ExistingBlob]


@dataclass
class BackfillReport:
    """Outcome of one backfill run"""
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    failed_files: List[str] = field(default_factory=list)


class IngestionService:
    """Sole writer of knowledge base records"""

    def __init__(
        self,
        storage: DocumentStorage,
        db: KnowledgeBaseDB,
        extractor: TextExtractor,
        max_file_size: Optional[int] = None,
    ):
        """
        Args:
            storage: Document bucket
            db: Record store
            extractor: Text extraction adapter
            max_file_size: Backfill skips bucket files above this size (bytes)
        """
        self.storage = storage
        self.db = db
        self.extractor = extractor
        self.max_file_size = max_file_size

    async def ingest(
        self,
        source: IngestSource,
        lecturer_name: str = "",
        uploaded_by: str = "",
        source_document: str = "",
        keywords: str = "",
        strict: bool = True,
    ) -> Optional[DocumentRecord]:
        """
        Store (if fresh), extract, index and persist one document

        Args:
            source: FreshUpload or ExistingBlob
            lecturer_name: Attribution label
            uploaded_by: Uploader label
            source_document: Optional source label (indexed)
            keywords: Free-text manual keywords (indexed)
            strict: Raise on insert failure instead of returning None

        Returns:
            Stored record, or None when the insert failed and strict=False

        Raises:
            StorageUploadError: Fresh upload could not be stored
            StorageDownloadError: Existing blob could not be downloaded
            RecordInsertError: Insert failed and strict=True
        """
        if isinstance(source, FreshUpload):
            filename = source.filename
            content = source.content
            storage_key = make_storage_key(filename)
            await self.storage.upload(storage_key, content, source.content_type)
            logger.info(f"Stored upload {filename!r} as {storage_key}")
        else:
            filename = source.name
            storage_key = source.name
            content = await self.storage.download(source.name)

        file_url = self.storage.get_public_url(storage_key)

        text = await self.extractor.extract_async(content, source.content_type, filename)
        if not text:
            logger.warning(f"No text extracted from {filename!r}, indexing metadata only")

        record = build_index_record(
            text,
            filename,
            lecturer_name=lecturer_name,
            keywords=keywords,
            source_document=source_document,
            uploaded_by=uploaded_by,
            file_url=file_url,
            storage_key=storage_key,
        )

        try:
            stored = await self.db.insert_record(record)
        except RecordInsertError as e:
            if strict:
                raise
            logger.warning(f"DB insert failed (continuing): {e}")
            return None

        logger.info(f"Indexed {filename!r}: id={stored.id}, {len(text)} chars extracted")
        return stored

    async def backfill_existing(self) -> BackfillReport:
        """
        Index bucket files that have no record yet

        Per-file failures are logged and counted, never raised.
        """
        report = BackfillReport()

        try:
            files = await self.storage.list_files()
            indexed_keys = await self.db.list_storage_keys()
        except Exception as e:
            logger.warning(f"Backfill aborted, could not list bucket or indexed files: {e}")
            return report

        for blob in files:
            if not blob.name or blob.name.endswith("/") or blob.name in indexed_keys:
                report.skipped += 1
                continue

            if self.max_file_size and blob.size and blob.size > self.max_file_size:
                logger.warning(f"Skipping {blob.name}: {blob.size} bytes exceeds {self.max_file_size}")
                report.skipped += 1
                continue

            logger.info(f"Processing existing file: {blob.name}")
            try:
                stored = await self.ingest(
                    ExistingBlob(name=blob.name, content_type=blob.content_type),
                    uploaded_by="system",
                    strict=False,
                )
            except KnowledgeBaseError as e:
                logger.warning(f"Failed to process existing file {blob.name}: {e}")
                stored = None

            if stored is None:
                report.failed += 1
                report.failed_files.append(blob.name)
            else:
                report.processed += 1

        logger.info(
            f"Finished processing existing files: processed={report.processed}, "
            f"skipped={report.skipped}, failed={report.failed}"
        )
        return report
