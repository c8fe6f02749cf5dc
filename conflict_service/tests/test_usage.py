"""
Tests for Usage and Billing
===========================
"""

import pytest
from datetime import datetime
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conflict_service.usage import COST_PER_DOCUMENT, COST_PER_REPORT, UsageTracker


class FakeClock:
    """Settable clock"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 15, 10, 0))


@pytest.fixture
def tracker(clock):
    return UsageTracker(clock=clock)


class TestBilling:
    """Tests for charges"""

    def test_default_prices(self):
        assert COST_PER_DOCUMENT == 2.50
        assert COST_PER_REPORT == 5.00

    def test_starts_empty(self, tracker):
        stats = tracker.snapshot()

        assert stats.documents_analyzed == 0
        assert stats.reports_generated == 0
        assert stats.total_billing == 0.0
        assert stats.current_month_billing == 0.0
        assert stats.last_analysis is None

    def test_documents_and_report(self, tracker, clock):
        """Two documents and one report cost 10.00"""
        tracker.record_documents(2)
        tracker.record_report()
        stats = tracker.snapshot()

        assert stats.documents_analyzed == 2
        assert stats.reports_generated == 1
        assert stats.total_billing == 10.0
        assert stats.current_month_billing == 10.0
        assert stats.last_analysis == clock.now

    def test_zero_documents_is_noop(self, tracker):
        tracker.record_documents(0)
        tracker.record_documents(-3)
        assert tracker.snapshot().total_billing == 0.0

    def test_custom_prices(self, clock):
        tracker = UsageTracker(cost_per_document=1.0, cost_per_report=3.0, clock=clock)
        tracker.record_documents(3)
        tracker.record_report()
        assert tracker.snapshot().total_billing == 6.0

    def test_reset(self, tracker):
        tracker.record_documents(4)
        tracker.reset()
        assert tracker.snapshot().total_billing == 0.0


class TestMonthlyRollover:
    """Tests for the current-month counter"""

    def test_month_total_restarts(self, tracker, clock):
        tracker.record_documents(2)
        clock.now = datetime(2024, 2, 1, 8, 0)
        tracker.record_report()
        stats = tracker.snapshot()

        assert stats.total_billing == 10.0
        assert stats.current_month_billing == 5.0

    def test_month_total_reads_zero_after_month_ends(self, tracker, clock):
        tracker.record_documents(2)
        clock.now = datetime(2024, 2, 3, 8, 0)
        stats = tracker.snapshot()

        assert stats.total_billing == 5.0
        assert stats.current_month_billing == 0.0

    def test_same_month_next_year_is_new_month(self, tracker, clock):
        tracker.record_documents(1)
        clock.now = datetime(2025, 1, 15, 10, 0)
        assert tracker.snapshot().current_month_billing == 0.0
