"""
Report assembly.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from .schemas import Conflict, Report, ReportStatus, Severity


def severity_counts(conflicts: List[Conflict]) -> dict:
    """Count conflicts per severity level"""
    counts = {severity.value: 0 for severity in Severity}
    for conflict in conflicts:
        counts[conflict.severity.value] += 1
    return counts


def build_report(
    documents: List[str],
    conflicts: List[Conflict],
    report_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Report:
    """
    Build a completed report over the given conflicts.

    documents: names of every document that took part in the analysis
    """
    counts = severity_counts(conflicts)
    return Report(
        id=report_id or uuid.uuid4().hex[:9],
        generated_at=generated_at or datetime.now(),
        documents=list(documents),
        conflicts=list(conflicts),
        total_conflicts=len(conflicts),
        high_severity=counts[Severity.HIGH.value],
        medium_severity=counts[Severity.MEDIUM.value],
        low_severity=counts[Severity.LOW.value],
        status=ReportStatus.COMPLETED,
    )
