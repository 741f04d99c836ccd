"""
Upload validation.

Ingestion is lenient about content (a document whose text cannot be
extracted is still indexed by filename and keywords, and so is an empty
file), so validation only guards what must never reach the extractors:
oversized uploads (bounded memory before extraction starts).

It also resolves which extractor a file belongs to, from the declared
content type, the extension and, when both are inconclusive, magic bytes.
"""

from pathlib import Path
from typing import Literal, Optional

import magic
from fastapi import HTTPException, status

DocumentKind = Literal["pdf", "docx", "csv", "text", "unknown"]

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
CSV_MIME = "text/csv"
TEXT_MIME = "text/plain"

MIME_KINDS = {
    PDF_MIME: "pdf",
    DOCX_MIME: "docx",
    CSV_MIME: "csv",
    TEXT_MIME: "text",
}

EXTENSION_KINDS = {
    ".pdf": "pdf",
    ".docx": "docx",
    ".csv": "csv",
    ".txt": "text",
}

KIND_MIME = {kind: mime for mime, kind in MIME_KINDS.items()}

# Declared types that say nothing about the content
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


class ValidationError(HTTPException):
    """Upload rejected before processing"""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=message)


class ValidationResult:
    """Validated upload with resolved document kind"""

    def __init__(self, document_kind: DocumentKind, mime_type: str, size: int):
        self.document_kind = document_kind
        self.mime_type = mime_type
        self.size = size


class FileValidator:
    """Size guard + document kind resolution for uploads and bucket files"""

    DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

    def __init__(self, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_file_size = max_file_size
        self.mime_detector = magic.Magic(mime=True)

    def validate(self, filename: str, content: bytes, declared_type: Optional[str] = None) -> ValidationResult:
        """
        Validate uploaded file

        Args:
            filename: Original filename
            content: File content as bytes
            declared_type: Content type sent by the client (may be empty)

        Returns:
            ValidationResult with resolved document kind

        Raises:
            ValidationError: Oversized upload (413)

        Empty files are accepted: they are indexed by filename, source label
        and keywords only.
        """
        self.check_size(filename, len(content))

        kind = self.resolve_kind(filename, content, declared_type)
        mime_type = KIND_MIME.get(kind) or (declared_type or "application/octet-stream")
        return ValidationResult(document_kind=kind, mime_type=mime_type, size=len(content))

    def check_size(self, filename: str, size: int):
        """Reject uploads above the configured cap"""
        if size > self.max_file_size:
            raise ValidationError(
                f"File '{filename}' is too large ({size / 1024 / 1024:.1f}MB). "
                f"Maximum allowed: {self.max_file_size / 1024 / 1024:.1f}MB.",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )

    def resolve_kind(self, filename: str, content: bytes, declared_type: Optional[str] = None) -> DocumentKind:
        """Declared type first, then extension, then magic bytes"""
        declared = (declared_type or "").split(";")[0].strip().lower()
        if declared in MIME_KINDS:
            return MIME_KINDS[declared]

        ext = Path(filename or "").suffix.lower()
        if ext in EXTENSION_KINDS:
            return EXTENSION_KINDS[ext]

        detected = self._detect_mime_type(content)
        if detected in MIME_KINDS:
            return MIME_KINDS[detected]
        if detected.startswith("text/"):
            return "text"
        if declared.startswith("text/"):
            return "text"
        return "unknown"

    def _detect_mime_type(self, content: bytes) -> str:
        """Detect MIME type from file content (first 2KB)"""
        if not content:
            return ""
        return self.mime_detector.from_buffer(content[:2048])
