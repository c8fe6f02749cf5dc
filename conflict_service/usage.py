"""
Usage and billing counters.

Counters live for the lifetime of the process; nothing is persisted.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Tuple

from .schemas import UsageStats

logger = logging.getLogger(__name__)

COST_PER_DOCUMENT = 2.50
COST_PER_REPORT = 5.00


class UsageTracker:
    """
    Billing counters: each uploaded document and each generated report is
    charged once. current_month_billing restarts when the calendar month
    changes.
    """

    def __init__(
        self,
        cost_per_document: float = COST_PER_DOCUMENT,
        cost_per_report: float = COST_PER_REPORT,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cost_per_document = cost_per_document
        self.cost_per_report = cost_per_report
        self._clock = clock
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._documents = 0
            self._reports = 0
            self._total = 0.0
            self._month_total = 0.0
            self._month: Optional[Tuple[int, int]] = None
            self._last_analysis: Optional[datetime] = None

    def _charge(self, amount: float, now: datetime) -> None:
        month = (now.year, now.month)
        if self._month != month:
            self._month = month
            self._month_total = 0.0
        self._total += amount
        self._month_total += amount

    def record_documents(self, count: int = 1) -> None:
        """Charge for newly uploaded documents"""
        if count <= 0:
            return
        with self._lock:
            self._documents += count
            self._charge(count * self.cost_per_document, self._clock())
        logger.info(f"Usage: +{count} documents ({self._documents} total)")

    def record_report(self) -> None:
        """Charge for a generated report and stamp the last analysis time"""
        with self._lock:
            now = self._clock()
            self._reports += 1
            self._charge(self.cost_per_report, now)
            self._last_analysis = now
        logger.info(f"Usage: +1 report ({self._reports} total)")

    def snapshot(self) -> UsageStats:
        with self._lock:
            month_total = self._month_total
            if self._month is not None:
                now = self._clock()
                if self._month != (now.year, now.month):
                    month_total = 0.0
            return UsageStats(
                documents_analyzed=self._documents,
                reports_generated=self._reports,
                total_billing=round(self._total, 2),
                current_month_billing=round(month_total, 2),
                last_analysis=self._last_analysis,
            )
