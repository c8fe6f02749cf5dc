"""
Pydantic Schemas for Conflict Service
=====================================

Stable, minimal schemas for input/output.
All outputs are guaranteed valid JSON.

Records:
- DocumentInput: caller-supplied {name, content}
- MatchOutput: one pairwise contradiction between two statements
- Conflict: user-facing conflict with description and suggestions
- Report: conflict report with severity counts
- UsageStats: per-process billing counters
- ExternalSource: mocked external policy source
"""

from typing import List, Optional, Dict
from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime


# =============================================================================
# ENUMS
# =============================================================================

class ConflictType(str, Enum):
    """
    Kind of conflict between two statements.

    Only CONTRADICTION is emitted today; OVERLAP and INCONSISTENCY are
    accepted in conflict records for callers that build their own.
    """
    CONTRADICTION = "contradiction"
    OVERLAP = "overlap"
    INCONSISTENCY = "inconsistency"


class Severity(str, Enum):
    """
    Conflict severity levels.

    - HIGH: Conflicting values that need immediate attention
    - MEDIUM: Notable inconsistency worth reviewing
    - LOW: Minor discrepancy
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReportStatus(str, Enum):
    """Report generation status"""
    COMPLETED = "completed"
    PROCESSING = "processing"
    FAILED = "failed"


class DocumentType(str, Enum):
    """Uploaded document type, derived from the file name"""
    PDF = "pdf"
    TXT = "txt"
    DOCX = "docx"


class ExportFormat(str, Enum):
    """Report download formats"""
    MARKDOWN = "md"
    DOCX = "docx"
    PDF = "pdf"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class DocumentInput(BaseModel):
    """A document to analyze, content already decoded to text"""
    name: str = Field(..., description="Document name (shown in results)")
    content: str = Field("", description="Document text")


class AnalyzeDocumentsRequest(BaseModel):
    """Request to analyze a set of documents for pairwise conflicts"""
    documents: List[DocumentInput] = Field(..., description="Documents to compare (at least 2 for results)")

    class Config:
        json_schema_extra = {
            "example": {
                "documents": [
                    {
                        "name": "Project Guidelines",
                        "content": "All project submissions must be completed before 10:00 PM on the due date."
                    },
                    {
                        "name": "Student Handbook",
                        "content": "All project submissions must be completed before 11:59 PM on the due date."
                    }
                ]
            }
        }


class CreateReportRequest(BaseModel):
    """Request to build a report from stored conflicts"""
    conflict_ids: Optional[List[str]] = Field(
        None,
        description="Subset of stored conflict IDs to include (default: all)"
    )


class AddSourceRequest(BaseModel):
    """Request to register an external source to monitor"""
    name: str = Field(..., description="Display name")
    url: str = Field(..., description="Source URL (never fetched)")


# =============================================================================
# OUTPUT SCHEMAS
# =============================================================================

class MatchOutput(BaseModel):
    """Raw detector match between two statements"""
    document1: str
    document2: str
    text1: str
    text2: str
    context1: str
    context2: str
    type: ConflictType
    severity: Severity
    confidence: float = Field(..., ge=0.0, le=1.0)


class ConflictingText(BaseModel):
    """One side of a conflict"""
    document: str = Field(..., description="Document name")
    text: str = Field(..., description="Conflicting statement")
    context: str = Field("", description="Where the statement was found")


class Conflict(BaseModel):
    """User-facing conflict with description and suggested resolutions"""
    id: str
    type: ConflictType
    severity: Severity
    documents: List[str] = Field(default_factory=list)
    description: str
    suggestions: List[str] = Field(default_factory=list)
    conflicting_text: List[ConflictingText] = Field(default_factory=list)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)


class AnalysisMetadata(BaseModel):
    """Analysis run metadata"""
    documents_analyzed: int = 0
    pairs_compared: int = 0
    segments_per_document: Dict[str, int] = Field(default_factory=dict)
    detector_counts: Dict[str, int] = Field(default_factory=dict)
    matches_before_dedup: int = 0
    duration_ms: float = 0.0


class AnalysisResponse(BaseModel):
    """Response from analysis endpoints"""
    matches: List[MatchOutput] = Field(default_factory=list)
    conflicts: List[Conflict] = Field(default_factory=list)
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)


class StoredDocument(BaseModel):
    """Document held in the service session"""
    id: str
    name: str
    content: str
    uploaded_at: datetime
    type: DocumentType
    size: int = Field(..., description="Size in bytes of the uploaded file")


class Report(BaseModel):
    """Conflict analysis report"""
    id: str
    generated_at: datetime
    documents: List[str] = Field(default_factory=list)
    conflicts: List[Conflict] = Field(default_factory=list)
    total_conflicts: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0
    status: ReportStatus = ReportStatus.COMPLETED


class UsageStats(BaseModel):
    """Usage and billing counters"""
    documents_analyzed: int = 0
    reports_generated: int = 0
    total_billing: float = 0.0
    current_month_billing: float = 0.0
    last_analysis: Optional[datetime] = None


class ExternalSource(BaseModel):
    """External policy source (mocked, never fetched)"""
    id: str
    name: str
    url: str
    last_checked: datetime
    has_updates: bool = False
    conflicts: List[Conflict] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Current timestamp")
