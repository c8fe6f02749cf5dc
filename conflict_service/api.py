"""
Conflict Service API
====================

FastAPI endpoints for document conflict detection and reporting.

Core Endpoints:
- POST /analyze                  - Analyze documents supplied in the request
- GET  /health                   - Health check

Session Endpoints (in-memory, lost on restart):
- POST   /documents              - Upload documents (multipart "files")
- GET    /documents              - List uploaded documents
- DELETE /documents/{doc_id}     - Remove a document
- DELETE /documents              - Remove all documents and conflicts
- POST   /documents/analyze      - Analyze uploaded documents
- GET    /conflicts              - Conflicts of the latest analysis
- POST   /reports                - Build a report from stored conflicts
- GET    /reports                - List reports
- GET    /reports/{report_id}    - Get a report
- GET    /reports/{report_id}/download?format=md|docx|pdf
- GET    /usage                  - Usage and billing counters
- GET    /sources                - External sources (mocked)
- POST   /sources                - Add an external source
- POST   /sources/check          - Check all sources
- POST   /sources/{id}/check     - Check one source
- GET    /sources/{id}/conflicts - Conflicts reported by a source
- DELETE /sources/{id}           - Stop monitoring a source

Run with:
    uvicorn conflict_service.api:app --host 0.0.0.0 --port 8000
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException, UploadFile, File, Query, Response, Depends
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .schemas import (
    AnalyzeDocumentsRequest,
    AnalysisResponse,
    AnalysisMetadata,
    AddSourceRequest,
    Conflict,
    CreateReportRequest,
    ExportFormat,
    ExternalSource,
    HealthResponse,
    MatchOutput,
    Report,
    StoredDocument,
    UsageStats,
)
from .detector import ContradictionDetector, DetectionResult
from .conflicts import matches_to_conflicts
from .reports import build_report
from .exporter import MEDIA_TYPES, export_report, report_filename
from .ingest import ParserError, UnsupportedFormatError, parse_document, document_type
from .store import SessionStore, NotFoundError
from .usage import UsageTracker
from .monitoring import ExternalSourceMonitor, SourceNotFoundError

# Configure logging
settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

for warning in settings.validate_config():
    logger.warning(warning)


# =============================================================================
# Service State
# =============================================================================

_store: Optional[SessionStore] = None
_usage: Optional[UsageTracker] = None
_monitor: Optional[ExternalSourceMonitor] = None


def get_store() -> SessionStore:
    global _store
    if _store is None:
        _store = SessionStore()
    return _store


def get_usage_tracker() -> UsageTracker:
    global _usage
    if _usage is None:
        _usage = UsageTracker(
            cost_per_document=settings.cost_per_document,
            cost_per_report=settings.cost_per_report,
        )
    return _usage


def get_monitor() -> ExternalSourceMonitor:
    global _monitor
    if _monitor is None:
        _monitor = ExternalSourceMonitor()
    return _monitor


def get_detector() -> ContradictionDetector:
    return ContradictionDetector(max_matches=settings.max_matches)


def reset_state() -> None:
    """Drop all session state (documents, reports, usage, sources)"""
    global _store, _usage, _monitor
    _store = None
    _usage = None
    _monitor = None


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="Conflict Service",
    description="Pairwise conflict detection between short policy documents",
    version=settings.service_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

CORS_ALLOW_ORIGINS = settings.parsed_cors_origins()
logger.info(f"CORS allow origins: {CORS_ALLOW_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def build_analysis_response(result: DetectionResult, conflicts: List[Conflict]) -> AnalysisResponse:
    """Convert a detection result into the API response"""
    meta = result.metadata
    return AnalysisResponse(
        matches=[MatchOutput(**match.to_dict()) for match in result.matches],
        conflicts=conflicts,
        metadata=AnalysisMetadata(
            documents_analyzed=meta.get("documents_analyzed", 0),
            pairs_compared=meta.get("pairs_compared", 0),
            segments_per_document=meta.get("segments_per_document", {}),
            detector_counts={
                "numeric": meta.get("numeric_count", 0),
                "time": meta.get("time_count", 0),
                "policy": meta.get("policy_count", 0),
            },
            matches_before_dedup=meta.get("matches_before_dedup", 0),
            duration_ms=result.detection_time_ms,
        ),
    )


# =============================================================================
# Health & Analysis
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        version=settings.service_version,
        timestamp=datetime.now()
    )


@app.post(
    "/analyze",
    response_model=AnalysisResponse,
    tags=["Analysis"],
    summary="Analyze documents for pairwise conflicts",
    responses={
        200: {"description": "Successful analysis"},
        400: {"description": "Too many documents"},
    }
)
async def analyze(
    request: AnalyzeDocumentsRequest,
    detector: ContradictionDetector = Depends(get_detector),
):
    """
    Compare every pair of documents and return the most confident conflicts.

    Fewer than two documents is not an error: the result is simply empty.
    """
    if len(request.documents) > settings.max_documents_per_request:
        raise HTTPException(
            status_code=400,
            detail=f"Too many documents (max {settings.max_documents_per_request})"
        )

    result = detector.detect(request.documents)
    return build_analysis_response(result, matches_to_conflicts(result.matches))


# =============================================================================
# Documents
# =============================================================================

@app.post("/documents", response_model=List[StoredDocument], tags=["Documents"], summary="Upload documents")
async def upload_documents(
    files: List[UploadFile] = File(...),
    store: SessionStore = Depends(get_store),
    usage: UsageTracker = Depends(get_usage_tracker),
):
    """
    Upload one or more documents.

    Supports TXT, Markdown, CSV; PDF and DOCX are decoded as text.
    All files are parsed before any is stored: one bad file rejects the
    whole request.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files provided (expected multipart field 'files')")

    parsed_uploads = []
    for upload in files:
        filename = upload.filename or "document.txt"
        data = await upload.read()

        if len(data) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"{filename} exceeds {settings.max_upload_bytes} bytes"
            )

        try:
            parsed = parse_document(data, filename)
        except UnsupportedFormatError as e:
            raise HTTPException(status_code=415, detail=str(e))
        except ParserError as e:
            logger.error(f"Failed to parse {filename}: {e}", exc_info=True)
            raise HTTPException(status_code=400, detail=str(e))

        parsed_uploads.append((filename, parsed.full_text, len(data)))

    stored: List[StoredDocument] = [
        store.add_document(
            name=filename,
            content=content,
            doc_type=document_type(filename),
            size=size,
        )
        for filename, content, size in parsed_uploads
    ]

    usage.record_documents(len(stored))
    return stored


@app.get("/documents", response_model=List[StoredDocument], tags=["Documents"], summary="List documents")
async def list_documents(store: SessionStore = Depends(get_store)):
    return store.list_documents()


@app.delete("/documents/{doc_id}", status_code=204, tags=["Documents"], summary="Remove a document")
async def remove_document(doc_id: str, store: SessionStore = Depends(get_store)):
    try:
        store.remove_document(doc_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Document {doc_id} not found")
    return Response(status_code=204)


@app.delete("/documents", status_code=204, tags=["Documents"], summary="Remove all documents")
async def clear_documents(store: SessionStore = Depends(get_store)):
    store.clear()
    return Response(status_code=204)


@app.post(
    "/documents/analyze",
    response_model=AnalysisResponse,
    tags=["Analysis"],
    summary="Analyze uploaded documents"
)
async def analyze_documents(
    store: SessionStore = Depends(get_store),
    detector: ContradictionDetector = Depends(get_detector),
):
    documents = store.list_documents()
    if len(documents) < 2:
        raise HTTPException(status_code=400, detail="At least two documents are required for analysis")

    result = detector.detect(documents)
    conflicts = matches_to_conflicts(result.matches)
    store.set_conflicts(conflicts)

    return build_analysis_response(result, conflicts)


@app.get("/conflicts", response_model=List[Conflict], tags=["Analysis"], summary="Latest conflicts")
async def list_conflicts(store: SessionStore = Depends(get_store)):
    return store.list_conflicts()


# =============================================================================
# Reports
# =============================================================================

@app.post("/reports", response_model=Report, tags=["Reports"], summary="Generate a report")
async def create_report(
    request: Optional[CreateReportRequest] = None,
    store: SessionStore = Depends(get_store),
    usage: UsageTracker = Depends(get_usage_tracker),
):
    conflict_ids = request.conflict_ids if request else None
    try:
        conflicts = store.select_conflicts(conflict_ids)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Conflict {e.args[0]} not found")

    report = build_report(
        documents=[doc.name for doc in store.list_documents()],
        conflicts=conflicts,
    )
    store.add_report(report)
    usage.record_report()

    logger.info(f"Report {report.id} generated with {report.total_conflicts} conflicts")
    return report


@app.get("/reports", response_model=List[Report], tags=["Reports"], summary="List reports")
async def list_reports(store: SessionStore = Depends(get_store)):
    return store.list_reports()


@app.get("/reports/{report_id}", response_model=Report, tags=["Reports"], summary="Get a report")
async def get_report(report_id: str, store: SessionStore = Depends(get_store)):
    try:
        return store.get_report(report_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")


@app.get("/reports/{report_id}/download", tags=["Reports"], summary="Download a report")
async def download_report(
    report_id: str,
    format: ExportFormat = Query(ExportFormat.MARKDOWN),
    store: SessionStore = Depends(get_store),
):
    try:
        report = store.get_report(report_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")

    try:
        content = export_report(report, format)
    except RuntimeError as e:
        logger.error(f"Export of report {report_id} as {format.value} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report, format)}"'},
    )


# =============================================================================
# Usage
# =============================================================================

@app.get("/usage", response_model=UsageStats, tags=["Usage"], summary="Usage and billing")
async def get_usage(usage: UsageTracker = Depends(get_usage_tracker)):
    return usage.snapshot()


# =============================================================================
# External Sources
# =============================================================================

@app.get("/sources", response_model=List[ExternalSource], tags=["Sources"], summary="List external sources")
async def list_sources(monitor: ExternalSourceMonitor = Depends(get_monitor)):
    return monitor.list_sources()


@app.post("/sources", response_model=ExternalSource, tags=["Sources"], summary="Add an external source")
async def add_source(request: AddSourceRequest, monitor: ExternalSourceMonitor = Depends(get_monitor)):
    return monitor.add_source(request.name, request.url)


@app.post("/sources/check", response_model=List[ExternalSource], tags=["Sources"], summary="Check all sources")
async def check_all_sources(monitor: ExternalSourceMonitor = Depends(get_monitor)):
    return monitor.check_all()


@app.post("/sources/{source_id}/check", response_model=ExternalSource, tags=["Sources"], summary="Check a source")
async def check_source(source_id: str, monitor: ExternalSourceMonitor = Depends(get_monitor)):
    try:
        return monitor.check_source(source_id)
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"Source {source_id} not found")


@app.get("/sources/{source_id}/conflicts", response_model=List[Conflict], tags=["Sources"], summary="Source conflicts")
async def get_source_conflicts(source_id: str, monitor: ExternalSourceMonitor = Depends(get_monitor)):
    try:
        return monitor.get_conflicts(source_id)
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"Source {source_id} not found")


@app.delete("/sources/{source_id}", status_code=204, tags=["Sources"], summary="Remove a source")
async def remove_source(source_id: str, monitor: ExternalSourceMonitor = Depends(get_monitor)):
    try:
        monitor.remove_source(source_id)
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"Source {source_id} not found")
    return Response(status_code=204)
