"""
Session Store
=============

In-memory state for the running service: uploaded documents, the conflicts
of the latest analysis and generated reports. Nothing is persisted; a
restart starts from an empty store.
"""

import uuid
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from .schemas import Conflict, DocumentType, Report, StoredDocument

logger = logging.getLogger(__name__)


class NotFoundError(KeyError):
    """Raised when a document, conflict or report ID is unknown"""


class SessionStore:
    """Thread-safe in-memory store"""

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: Dict[str, StoredDocument] = {}
        self._conflicts: List[Conflict] = []
        self._reports: Dict[str, Report] = {}

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def add_document(
        self,
        name: str,
        content: str,
        doc_type: DocumentType,
        size: int,
        uploaded_at: Optional[datetime] = None,
    ) -> StoredDocument:
        document = StoredDocument(
            id=uuid.uuid4().hex[:9],
            name=name,
            content=content,
            uploaded_at=uploaded_at or datetime.now(),
            type=doc_type,
            size=size,
        )
        with self._lock:
            self._documents[document.id] = document
        logger.info(f"Stored document {document.id} ({name}, {size} bytes)")
        return document

    def list_documents(self) -> List[StoredDocument]:
        """Documents in upload order"""
        with self._lock:
            return list(self._documents.values())

    def remove_document(self, doc_id: str) -> None:
        with self._lock:
            if self._documents.pop(doc_id, None) is None:
                raise NotFoundError(doc_id)

    def clear(self) -> None:
        """Drop all documents and conflicts; reports are kept"""
        with self._lock:
            self._documents.clear()
            self._conflicts = []

    # -------------------------------------------------------------------------
    # Conflicts
    # -------------------------------------------------------------------------

    def set_conflicts(self, conflicts: List[Conflict]) -> None:
        with self._lock:
            self._conflicts = list(conflicts)

    def list_conflicts(self) -> List[Conflict]:
        with self._lock:
            return list(self._conflicts)

    def select_conflicts(self, conflict_ids: Optional[List[str]] = None) -> List[Conflict]:
        """All conflicts, or the given subset in the requested order"""
        with self._lock:
            if conflict_ids is None:
                return list(self._conflicts)
            by_id = {conflict.id: conflict for conflict in self._conflicts}

        selected = []
        for conflict_id in conflict_ids:
            if conflict_id not in by_id:
                raise NotFoundError(conflict_id)
            selected.append(by_id[conflict_id])
        return selected

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def add_report(self, report: Report) -> Report:
        with self._lock:
            self._reports[report.id] = report
        return report

    def get_report(self, report_id: str) -> Report:
        with self._lock:
            report = self._reports.get(report_id)
        if report is None:
            raise NotFoundError(report_id)
        return report

    def list_reports(self) -> List[Report]:
        with self._lock:
            return list(self._reports.values())
