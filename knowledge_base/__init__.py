"""
Knowledge Base - keyword document search service.

Modules:
- keywords: tokenizer, index builder, candidate filter, scorer
- extraction: PDF / DOCX / text extraction
- ingestion: upload → extract → index → persist pipeline, startup backfill
- search: question → ranked document matches
- storage / database: GCS bucket and PostgreSQL record store
- main: FastAPI application
"""

__version__ = "0.1.0"
