"""
Knowledge Base - FastAPI application for keyword document search

Upload lecture material (PDF, DOCX, CSV, TXT), index it by keywords and
answer questions with the best-matching document excerpts.

Architecture:
- Google Cloud Storage keeps the original files
- PostgreSQL keeps one keyword-index row per document
- Retrieval: ILIKE substring filter in PostgreSQL, word-boundary
  re-scoring in Python (keywords.scorer)
- On startup, bucket files without a record are indexed in the background
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, List, Optional

from fastapi import FastAPI, File, Form, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .database import KnowledgeBaseDB
from .errors import RecordInsertError, SearchError, StorageUploadError
from .extraction import TextExtractor
from .file_validator import FileValidator, ValidationError
from .ingestion import FreshUpload, IngestionService
from .logging_config import setup_logging
from .models import DocumentRecord, ScoredMatch
from .search import SearchService
from .storage import DocumentStorage

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    documents: Optional[int] = None


class UploadResponse(BaseModel):
    ok: bool = True
    record: DocumentRecord


class AskRequest(BaseModel):
    question: Optional[str] = Field(None, description="Natural-language question")
    top_k: Optional[Any] = Field(
        None,
        description="Number of matches (default 2); invalid values fall back to the default",
    )

    model_config = {
        "json_schema_extra": {
            "example": {"question": "what is a balanced tree", "top_k": 2}
        }
    }


class AskResponse(BaseModel):
    matches: List[ScoredMatch]


def _upload_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[KnowledgeBaseDB] = None,
    storage: Optional[DocumentStorage] = None,
    extractor: Optional[TextExtractor] = None,
) -> FastAPI:
    """
    Build the FastAPI application

    Collaborators left as None are created (and owned) by the lifespan:
    the database pool is connected on startup and closed on shutdown.

    Args:
        settings: Runtime configuration (default: load_settings())
        db: Record store
        storage: Document bucket
        extractor: Text extraction adapter
    """
    settings = settings or load_settings()
    validator = FileValidator(max_file_size=settings.max_upload_bytes)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup resources"""
        owns_db = db is None
        kb_db = db or KnowledgeBaseDB(
            settings.database_url,
            max_pool_size=settings.db_pool_max_size,
            timeout=settings.storage_timeout_seconds,
        )
        if owns_db:
            logger.info("Connecting to database...")
            await kb_db.connect()
            await kb_db.init_schema()

        doc_storage = storage or DocumentStorage(
            bucket_name=settings.gcs_bucket,
            timeout=settings.storage_timeout_seconds,
        )
        text_extractor = extractor or TextExtractor(
            kind_resolver=validator.resolve_kind,
            timeout=settings.extraction_timeout_seconds,
        )

        app.state.db = kb_db
        app.state.ingestion = IngestionService(
            doc_storage, kb_db, text_extractor,
            max_file_size=settings.max_upload_bytes,
        )
        app.state.search = SearchService(
            kb_db,
            default_top_k=settings.default_top_k,
            max_top_k=settings.max_top_k,
            candidate_limit=settings.candidate_limit,
            snippet_chars=settings.snippet_chars,
        )

        backfill_task = None
        if settings.backfill_on_startup:
            logger.info(f"Scheduling backfill of existing files in gs://{settings.gcs_bucket}")
            backfill_task = asyncio.create_task(app.state.ingestion.backfill_existing())
        app.state.backfill_task = backfill_task

        yield

        logger.info("Shutting down...")
        if backfill_task and not backfill_task.done():
            backfill_task.cancel()
            try:
                await backfill_task
            except asyncio.CancelledError:
                pass
        if owns_db:
            await kb_db.disconnect()

    app = FastAPI(
        title="Knowledge Base API",
        description="Keyword search over uploaded lecture documents",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.started_at = datetime.utcnow()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint"""
        return {
            "service": "Knowledge Base API",
            "version": APP_VERSION,
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check with record count"""
        started_at = app.state.started_at
        uptime = (datetime.utcnow() - started_at).total_seconds()

        try:
            documents = await app.state.db.count_records()
            health_status = "healthy"
        except Exception as e:
            logger.warning(f"Health check could not count records: {e}")
            documents = None
            health_status = "degraded"

        return HealthResponse(
            status=health_status,
            version=APP_VERSION,
            started_at=started_at.isoformat() + "Z",
            uptime_seconds=round(uptime, 2),
            documents=documents,
        )

    @app.post("/upload", response_model=UploadResponse)
    async def upload(
        file: Optional[UploadFile] = File(None),
        lecturer: str = Form(""),
        uploaded_by: str = Form(""),
        source_document: str = Form(""),
        keywords: str = Form(""),
    ):
        """
        Upload, index and store a document

        Multipart fields:
        - file: PDF, DOCX, CSV or TXT (other types are decoded as UTF-8)
        - lecturer, uploaded_by: attribution (not searchable)
        - source_document: source label (searchable)
        - keywords: manual keywords (searchable)

        Example:
            POST /upload
            Content-Type: multipart/form-data
            file: week2.pdf
            lecturer: Dr. Smith
            keywords: trees, recursion
        """
        if file is None or not file.filename:
            return _upload_error(status.HTTP_400_BAD_REQUEST, "No file uploaded")

        try:
            # Reject oversized uploads before reading the body into memory
            if file.size is not None:
                validator.check_size(file.filename, file.size)
            content = await file.read()
            validation = validator.validate(file.filename, content, file.content_type)
        except ValidationError as e:
            return _upload_error(e.status_code, e.detail)

        logger.info(f"Processing upload: {file.filename} ({validation.document_kind}, {validation.size} bytes)")

        try:
            record = await app.state.ingestion.ingest(
                FreshUpload(
                    content=content,
                    filename=file.filename,
                    content_type=file.content_type or validation.mime_type,
                ),
                lecturer_name=lecturer,
                uploaded_by=uploaded_by,
                source_document=source_document,
                keywords=keywords,
                strict=True,
            )
        except StorageUploadError as e:
            logger.error(f"STORAGE UPLOAD FAILED: {e}")
            return _upload_error(status.HTTP_502_BAD_GATEWAY, f"Storage upload failed: {e}")
        except RecordInsertError as e:
            logger.error(f"Record insert failed: {e}")
            return _upload_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Processing failed")

        return UploadResponse(ok=True, record=record)

    @app.post("/ask", response_model=AskResponse)
    async def ask(request: AskRequest):
        """
        Answer a question with the best-matching document excerpts

        Example:
            POST /ask
            {"question": "what is a balanced tree", "top_k": 2}
        """
        if not request.question:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "Question required"},
            )

        try:
            matches = await app.state.search.ask(request.question, request.top_k)
        except SearchError as e:
            logger.error(f"[ask] error: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Search failed", "detail": str(e)},
            )

        return AskResponse(matches=matches)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        """HTTP errors carry an `error` message"""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc):
        """Malformed request bodies"""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder({"error": "Invalid request", "detail": exc.errors()}),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler"""
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Server error",
                "detail": str(exc),
            },
        )

    return app


settings = load_settings()
setup_logging(
    log_file="logs/knowledge-base.log",
    console_level=settings.log_level,
    file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "knowledge_base.main:app",
        host="0.0.0.0",
        port=settings.port,
    )
