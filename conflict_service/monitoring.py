"""
External Source Monitor
=======================

Mocked monitor for external policy pages. Sources are never fetched:
checking a source only refreshes its timestamp and keeps whatever canned
conflicts it carries.
"""

import uuid
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from .schemas import Conflict, ConflictingText, ConflictType, ExternalSource, Severity

logger = logging.getLogger(__name__)


class SourceNotFoundError(KeyError):
    """Raised when an external source ID is unknown"""


def _default_sources(now: datetime) -> List[ExternalSource]:
    return [
        ExternalSource(
            id="1",
            name="College Policy Page",
            url="https://college.edu/policies",
            last_checked=now - timedelta(minutes=30),
            has_updates=True,
            conflicts=[
                Conflict(
                    id="ext-1",
                    type=ConflictType.CONTRADICTION,
                    severity=Severity.HIGH,
                    documents=["College Policy Page", "Student Handbook"],
                    description="New policy contradicts existing attendance requirements",
                    suggestions=[
                        "Review updated attendance policy",
                        "Update student handbook to match",
                        "Notify affected students",
                    ],
                    conflicting_text=[
                        ConflictingText(
                            document="College Policy Page",
                            text="minimum 80% attendance required",
                            context="Updated policy effective immediately",
                        ),
                        ConflictingText(
                            document="Student Handbook",
                            text="minimum 75% attendance required",
                            context="Current handbook version",
                        ),
                    ],
                )
            ],
        ),
        ExternalSource(
            id="2",
            name="HR Policy Portal",
            url="https://company.com/hr-policies",
            last_checked=now - timedelta(hours=2),
            has_updates=False,
        ),
    ]


class ExternalSourceMonitor:
    """In-memory registry of external sources"""

    def __init__(self, clock: Callable[[], datetime] = datetime.now, seed_defaults: bool = True):
        self._clock = clock
        self._lock = threading.Lock()
        self._sources: Dict[str, ExternalSource] = {}
        if seed_defaults:
            for source in _default_sources(clock()):
                self._sources[source.id] = source

    def list_sources(self) -> List[ExternalSource]:
        with self._lock:
            return list(self._sources.values())

    def get_source(self, source_id: str) -> ExternalSource:
        with self._lock:
            source = self._sources.get(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        return source

    def add_source(self, name: str, url: str) -> ExternalSource:
        source = ExternalSource(
            id=uuid.uuid4().hex[:9],
            name=name,
            url=url,
            last_checked=self._clock(),
            has_updates=False,
        )
        with self._lock:
            self._sources[source.id] = source
        logger.info(f"Monitoring external source {name} ({url})")
        return source

    def check_source(self, source_id: str) -> ExternalSource:
        """Refresh a source's check time; no network access"""
        with self._lock:
            source = self._sources.get(source_id)
            if source is None:
                raise SourceNotFoundError(source_id)
            updated = source.model_copy(update={"last_checked": self._clock()})
            self._sources[source_id] = updated
        return updated

    def remove_source(self, source_id: str) -> None:
        with self._lock:
            if self._sources.pop(source_id, None) is None:
                raise SourceNotFoundError(source_id)

    def check_all(self) -> List[ExternalSource]:
        return [self.check_source(source.id) for source in self.list_sources()]

    def get_conflicts(self, source_id: Optional[str] = None) -> List[Conflict]:
        """Conflicts carried by one source, or by every source"""
        sources = [self.get_source(source_id)] if source_id else self.list_sources()
        return [conflict for source in sources for conflict in source.conflicts]
