"""Record and match models shared by the indexer, record store and ranker"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexedRecord(BaseModel):
    """Keyword-index record produced at ingestion, ready to be persisted"""
    model_config = ConfigDict(frozen=True)

    question_keywords: str = Field("", description="Comma-joined, deduplicated keyword tokens")
    answer_text: str = Field("", description="Extracted text (truncated to 20,000 chars)")
    filename: str = ""
    storage_key: str = Field("", description="Object name in the document bucket")
    file_url: str = ""
    uploaded_by: str = ""
    lecturer_name: str = ""
    source_document: str = ""


class DocumentRecord(IndexedRecord):
    """Persisted record as read back from the record store"""

    id: int
    created_at: Optional[datetime] = None

    @property
    def source_name(self) -> str:
        """Display name: explicit source label, falling back to the filename"""
        return self.source_document or self.filename


class ScoredMatch(BaseModel):
    """Single ranked answer returned by /ask"""

    score: int = Field(..., gt=0)
    id: int
    snippet: str
    lecturer: str = ""
    source: str = ""
    filename: str = ""
    file_url: str = ""
