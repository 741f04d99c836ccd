"""
Text extraction for ingested documents

Supported kinds:
- PDF: PyMuPDF4LLM (Markdown output, reading order preserved)
- DOCX: python-docx (paragraphs + table cells)
- CSV / plain text: UTF-8 decode (latin-1 fallback)
- Anything else: UTF-8 decode with replacement characters

Extraction never aborts ingestion: extract() logs the failure and returns ""
so the document is still indexed by filename, source label and keywords.
"""

import asyncio
import logging
from io import BytesIO
from typing import Callable, Optional

import pymupdf
import pymupdf4llm
from docx import Document as DocxDocument

from .errors import ExtractionError
from .file_validator import FileValidator

logger = logging.getLogger(__name__)

DEFAULT_EXTRACTION_TIMEOUT = 30.0


class TextExtractor:
    """Format-specific text extraction behind one extract() entry point"""

    def __init__(
        self,
        kind_resolver: Optional[Callable[[str, bytes, Optional[str]], str]] = None,
        timeout: float = DEFAULT_EXTRACTION_TIMEOUT,
    ):
        """
        Args:
            kind_resolver: (filename, content, declared_type) -> document kind;
                defaults to FileValidator.resolve_kind
            timeout: Upper bound for extract_async() in seconds
        """
        self.kind_resolver = kind_resolver or FileValidator().resolve_kind
        self.timeout = timeout

    def extract_text_from_pdf(self, content: bytes) -> str:
        """Extract PDF text as Markdown"""
        try:
            doc = pymupdf.open(stream=content, filetype="pdf")
        except Exception as e:
            raise ExtractionError(f"Cannot open PDF: {e}") from e
        try:
            logger.debug(f"PDF has {len(doc)} pages, extracting text...")
            markdown_text = pymupdf4llm.to_markdown(doc)
        except Exception as e:
            raise ExtractionError(f"PDF text extraction failed: {e}") from e
        finally:
            doc.close()
        logger.debug(f"Extracted {len(markdown_text)} chars from PDF")
        return markdown_text

    def extract_text_from_docx(self, content: bytes) -> str:
        """Extract paragraphs and table cell text from a DOCX file"""
        try:
            doc = DocxDocument(BytesIO(content))
        except Exception as e:
            raise ExtractionError(f"Cannot open DOCX: {e}") from e

        parts = [paragraph.text for paragraph in doc.paragraphs if paragraph.text]
        for table in doc.tables:
            for row in table.rows:
                for cell in row.cells:
                    if cell.text:
                        parts.append(cell.text)
        return "\n".join(parts).strip()

    def extract_text_from_txt(self, content: bytes) -> str:
        """Decode CSV / plain text"""
        try:
            return content.decode('utf-8')
        except UnicodeDecodeError:
            # latin-1 never fails
            logger.warning("UTF-8 decode failed, using latin-1")
            return content.decode('latin-1', errors='replace')

    def extract(self, content: Optional[bytes], declared_type: Optional[str] = None, filename: str = "") -> str:
        """
        Extract text from file content based on its kind

        Args:
            content: File bytes (None or b"" yields "")
            declared_type: Declared MIME type (may be empty)
            filename: Original filename (extension used for kind detection)

        Returns:
            Extracted text, or "" when extraction failed
        """
        if not content:
            return ""

        try:
            kind = self.kind_resolver(filename, content, declared_type)
            if kind == "pdf":
                text = self.extract_text_from_pdf(content)
            elif kind == "docx":
                text = self.extract_text_from_docx(content)
            elif kind in ("csv", "text"):
                text = self.extract_text_from_txt(content)
            else:
                logger.debug(f"Unrecognized type for {filename!r} ({declared_type!r}), decoding as UTF-8")
                text = content.decode('utf-8', errors='replace')
        except Exception as e:
            logger.warning(f"File parsing failed for {filename!r} (continuing with empty text): {e}")
            return ""

        # PostgreSQL TEXT cannot hold NUL characters
        return text.replace('\x00', '')

    async def extract_async(self, content: Optional[bytes], declared_type: Optional[str] = None, filename: str = "") -> str:
        """extract() in a worker thread, bounded by the extraction timeout"""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.extract, content, declared_type, filename),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Extraction timed out after {self.timeout}s for {filename!r} (continuing with empty text)")
            return ""
