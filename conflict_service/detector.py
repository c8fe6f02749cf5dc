"""
Contradiction Detector - Rule-based pairwise detection across documents
=======================================================================

Detection types:
1. NUMERIC - Same context, different percentages or durations
2. TIME - Same context, different times of day
3. POLICY - Same context, opposing modality (required/optional, must/may, ...)

Approach:
- Statements are extracted per document (see extractor.py)
- Every statement of document A is compared with every statement of document B
- Relatedness is a plain token-overlap ratio; it gates each detector and is
  reported as the match confidence
- Matches across all document pairs are deduplicated, ranked by confidence
  and capped (see dedup.py)

Numeric comparison ignores units: a percentage can be compared against a
number of days. Time comparison is by the literal matched text, so
"10:00 PM" and "10:00PM" are different values.
"""

import re
import logging
from typing import List, Dict, Any, Optional, Tuple, Sequence, Callable
from dataclasses import dataclass, field
from datetime import datetime

from .extractor import Segment, SentenceExtractor, get_extractor
from .dedup import deduplicate_matches, rank_matches
from .schemas import ConflictType, Severity

logger = logging.getLogger(__name__)


# =============================================================================
# Thresholds
# =============================================================================

NUMERIC_SIMILARITY_THRESHOLD = 0.3
TIME_SIMILARITY_THRESHOLD = 0.2
POLICY_SIMILARITY_THRESHOLD = 0.2

# Numbers closer than this are the same value
NUMERIC_MIN_DIFFERENCE = 0.1
# Differences above this are HIGH severity, otherwise MEDIUM
NUMERIC_HIGH_SEVERITY_DIFFERENCE = 20

# Only tokens longer than this count towards similarity
MIN_SHARED_TOKEN_LENGTH = 3

MAX_MATCHES = 10


# =============================================================================
# Patterns
# =============================================================================

# ASCII digits only
PERCENT_PATTERN = re.compile(r'([0-9]+(?:\.[0-9]+)?)\s*%')
QUANTITY_PATTERN = re.compile(
    r'([0-9]+(?:\.[0-9]+)?)\s*(days?|weeks?|months?|hours?|minutes?)',
    re.IGNORECASE
)

# Applied in order; every match of every pattern is kept
TIME_PATTERNS = (
    re.compile(r'[0-9]{1,2}:[0-9]{2}\s*(AM|PM|am|pm)'),
    re.compile(r'[0-9]{1,2}\s*(AM|PM|am|pm)'),
    re.compile(r'midnight', re.IGNORECASE),
    re.compile(r'noon', re.IGNORECASE),
)

OPPOSING_TERMS: Tuple[Tuple[str, str], ...] = (
    ('required', 'optional'),
    ('mandatory', 'voluntary'),
    ('must', 'may'),
    ('shall', 'should'),
    ('minimum', 'maximum'),
    ('before', 'after'),
    ('early', 'late'),
    ('allowed', 'prohibited'),
    ('permitted', 'forbidden'),
)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class ExtractedNumber:
    """Number parsed from a statement, with the unit it was written with"""
    value: float
    unit: str


@dataclass
class ContradictionMatch:
    """One detected conflict between statements of two documents"""
    document1: str
    document2: str
    text1: str
    text2: str
    context1: str
    context2: str
    type: ConflictType
    severity: Severity
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document1": self.document1,
            "document2": self.document2,
            "text1": self.text1,
            "text2": self.text2,
            "context1": self.context1,
            "context2": self.context2,
            "type": self.type.value,
            "severity": self.severity.value,
            "confidence": self.confidence,
        }


@dataclass
class DetectionResult:
    """Result from detection"""
    matches: List[ContradictionMatch]
    detection_time_ms: float
    method: str
    metadata: Dict[str, Any] = field(default_factory=dict)


# A rule inspects one statement pair and returns (severity, confidence) for
# every match it wants to emit.
PairRule = Callable[[Segment, Segment], List[Tuple[Severity, float]]]


# =============================================================================
# Extraction Helpers
# =============================================================================

def extract_numbers(text: str) -> List[ExtractedNumber]:
    """Extract percentages, then durations, from text"""
    numbers = []

    for match in PERCENT_PATTERN.finditer(text):
        numbers.append(ExtractedNumber(value=float(match.group(1)), unit='%'))

    for match in QUANTITY_PATTERN.finditer(text):
        numbers.append(ExtractedNumber(value=float(match.group(1)), unit=match.group(2)))

    return numbers


def extract_times(text: str) -> List[str]:
    """Extract raw time-of-day strings (e.g. "10:00 PM", "noon")"""
    times = []
    for pattern in TIME_PATTERNS:
        times.extend(match.group(0) for match in pattern.finditer(text))
    return times


def calculate_context_similarity(text1: str, text2: str) -> float:
    """
    Token-overlap ratio between two statements (0-1).

    Counts tokens of text1 longer than 3 characters that also appear in
    text2, divided by the longer token list.
    """
    words1 = text1.lower().split()
    words2 = text2.lower().split()

    longest = max(len(words1), len(words2))
    if longest == 0:
        return 0.0

    vocabulary2 = set(words2)
    common = [
        word for word in words1
        if word in vocabulary2 and len(word) > MIN_SHARED_TOKEN_LENGTH
    ]

    return len(common) / longest


def has_opposing_terms(text1: str, text2: str) -> bool:
    """Check if one text uses a term and the other its opposite"""
    lowered1 = text1.lower()
    lowered2 = text2.lower()

    for term_a, term_b in OPPOSING_TERMS:
        if term_a in lowered1 and term_b in lowered2:
            return True
        if term_b in lowered1 and term_a in lowered2:
            return True

    return False


# =============================================================================
# Pairwise Scan
# =============================================================================

def scan_segment_pairs(
    segments1: Sequence[Segment],
    segments2: Sequence[Segment],
    doc1: str,
    doc2: str,
    rule: PairRule
) -> List[ContradictionMatch]:
    """
    Run a rule over the cross product of two documents' statements.

    Args:
        segments1: Statements of the first document
        segments2: Statements of the second document
        doc1: First document name
        doc2: Second document name
        rule: Returns (severity, confidence) per match to emit

    Returns:
        Matches in (segment1, segment2, emission) order
    """
    matches = []

    for seg1 in segments1:
        for seg2 in segments2:
            for severity, confidence in rule(seg1, seg2):
                matches.append(ContradictionMatch(
                    document1=doc1,
                    document2=doc2,
                    text1=seg1.text,
                    text2=seg2.text,
                    context1=seg1.context,
                    context2=seg2.context,
                    type=ConflictType.CONTRADICTION,
                    severity=severity,
                    confidence=confidence
                ))

    return matches


def _numeric_rule(seg1: Segment, seg2: Segment) -> List[Tuple[Severity, float]]:
    numbers1 = extract_numbers(seg1.text)
    numbers2 = extract_numbers(seg2.text)
    if not numbers1 or not numbers2:
        return []

    similarity = calculate_context_similarity(seg1.text, seg2.text)
    if similarity <= NUMERIC_SIMILARITY_THRESHOLD:
        return []

    emissions = []
    for num1 in numbers1:
        for num2 in numbers2:
            difference = abs(num1.value - num2.value)
            if difference > NUMERIC_MIN_DIFFERENCE:
                severity = Severity.HIGH if difference > NUMERIC_HIGH_SEVERITY_DIFFERENCE else Severity.MEDIUM
                emissions.append((severity, similarity))

    return emissions


def _time_rule(seg1: Segment, seg2: Segment) -> List[Tuple[Severity, float]]:
    times1 = extract_times(seg1.text)
    times2 = extract_times(seg2.text)
    if not times1 or not times2:
        return []

    similarity = calculate_context_similarity(seg1.text, seg2.text)
    if similarity <= TIME_SIMILARITY_THRESHOLD:
        return []

    return [
        (Severity.HIGH, similarity)
        for time1 in times1
        for time2 in times2
        if time1 != time2
    ]


def _policy_rule(seg1: Segment, seg2: Segment) -> List[Tuple[Severity, float]]:
    if not has_opposing_terms(seg1.text, seg2.text):
        return []

    similarity = calculate_context_similarity(seg1.text, seg2.text)
    if similarity <= POLICY_SIMILARITY_THRESHOLD:
        return []

    return [(Severity.MEDIUM, similarity)]


# =============================================================================
# Detectors
# =============================================================================

def find_numerical_contradictions(
    segments1: Sequence[Segment],
    segments2: Sequence[Segment],
    doc1: str,
    doc2: str
) -> List[ContradictionMatch]:
    """Different percentages/durations in related statements"""
    return scan_segment_pairs(segments1, segments2, doc1, doc2, _numeric_rule)


def find_time_contradictions(
    segments1: Sequence[Segment],
    segments2: Sequence[Segment],
    doc1: str,
    doc2: str
) -> List[ContradictionMatch]:
    """Different times of day in related statements"""
    return scan_segment_pairs(segments1, segments2, doc1, doc2, _time_rule)


def find_policy_contradictions(
    segments1: Sequence[Segment],
    segments2: Sequence[Segment],
    doc1: str,
    doc2: str
) -> List[ContradictionMatch]:
    """Opposing modality (required vs optional, must vs may, ...) in related statements"""
    return scan_segment_pairs(segments1, segments2, doc1, doc2, _policy_rule)


# =============================================================================
# Detector
# =============================================================================

def _document_fields(document: Any) -> Tuple[str, str]:
    """Read (name, content) from a mapping or an object"""
    if isinstance(document, dict):
        return document.get("name", ""), document.get("content", "") or ""
    return getattr(document, "name", ""), getattr(document, "content", "") or ""


class ContradictionDetector:
    """
    Pairwise contradiction detector over a list of documents.

    Every unordered document pair (i < j, input order) is compared with the
    numeric, time and policy detectors. Results are deduplicated on the
    statement pair, ranked by confidence and capped at max_matches.
    """

    def __init__(
        self,
        extractor: Optional[SentenceExtractor] = None,
        max_matches: int = MAX_MATCHES
    ):
        self.extractor = extractor or get_extractor()
        self.max_matches = max_matches

    def detect(self, documents: Sequence[Any]) -> DetectionResult:
        """
        Detect conflicts between documents.

        Args:
            documents: Sequence of {name, content} mappings or objects

        Returns:
            DetectionResult with ranked matches
        """
        start_time = datetime.now()

        if len(documents) < 2:
            return DetectionResult(
                matches=[],
                detection_time_ms=0.0,
                method="rule_based",
                metadata={"documents_analyzed": len(documents), "pairs_compared": 0}
            )

        fields = [_document_fields(doc) for doc in documents]
        segments = [self.extractor.extract(content, name) for name, content in fields]

        all_matches: List[ContradictionMatch] = []
        numeric_count = time_count = policy_count = pairs = 0

        for i in range(len(fields)):
            for j in range(i + 1, len(fields)):
                name1, name2 = fields[i][0], fields[j][0]
                pairs += 1

                numeric = find_numerical_contradictions(segments[i], segments[j], name1, name2)
                timing = find_time_contradictions(segments[i], segments[j], name1, name2)
                policy = find_policy_contradictions(segments[i], segments[j], name1, name2)

                numeric_count += len(numeric)
                time_count += len(timing)
                policy_count += len(policy)

                all_matches.extend(numeric)
                all_matches.extend(timing)
                all_matches.extend(policy)

        unique = deduplicate_matches(all_matches)
        ranked = rank_matches(unique, limit=self.max_matches)

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000

        logger.info(
            f"Rule-based detection complete: {len(ranked)} matches "
            f"(numeric={numeric_count}, time={time_count}, policy={policy_count}, "
            f"unique={len(unique)}) across {pairs} document pairs in {elapsed_ms:.1f}ms"
        )

        segments_per_document: Dict[str, int] = {}
        for (name, _), doc_segments in zip(fields, segments):
            segments_per_document[name] = segments_per_document.get(name, 0) + len(doc_segments)

        return DetectionResult(
            matches=ranked,
            detection_time_ms=elapsed_ms,
            method="rule_based",
            metadata={
                "documents_analyzed": len(fields),
                "pairs_compared": pairs,
                "segments_per_document": segments_per_document,
                "numeric_count": numeric_count,
                "time_count": time_count,
                "policy_count": policy_count,
                "matches_before_dedup": len(all_matches),
            }
        )


# =============================================================================
# Singleton & Convenience Functions
# =============================================================================

_detector = None

def get_detector() -> ContradictionDetector:
    """Get singleton detector instance"""
    global _detector
    if _detector is None:
        _detector = ContradictionDetector()
    return _detector


def analyze_documents(documents: Sequence[Any]) -> List[ContradictionMatch]:
    """
    Convenience function to find conflicts between documents.

    Args:
        documents: Sequence of {name, content} mappings or objects

    Returns:
        Up to 10 matches, highest confidence first
    """
    return get_detector().detect(documents).matches
