"""
Sentence Extractor - Extract conflict-prone statements from document text
=========================================================================

Simple, rule-based statement extraction:
1. Split text into sentences on runs of . ! ?
2. Drop fragments of 10 characters or fewer
3. Keep sentences that mention a conflict indicator (deadline, %, must, ...)

Sentence numbering counts every split fragment, so "Sentence 3" always
refers to the third fragment of the original text even when earlier ones
were dropped.
"""

import re
from typing import Dict, List, Mapping, FrozenSet
from dataclasses import dataclass

__all__ = [
    'Segment',
    'SentenceExtractor',
    'CONFLICT_INDICATORS',
    'MIN_SEGMENT_LENGTH',
    'extract_relevant_sentences',
    'get_extractor',
]


# Keywords that often indicate conflicting information, by topic
CONFLICT_INDICATORS: Dict[str, FrozenSet[str]] = {
    "time": frozenset([
        'deadline', 'due', 'submit', 'before', 'after', 'until', 'by',
        'pm', 'am', 'midnight', 'noon'
    ]),
    "dates": frozenset([
        'date', 'day', 'week', 'month', 'year',
        'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'
    ]),
    "numbers": frozenset([
        'percent', '%', 'minimum', 'maximum', 'at least', 'no more than',
        'exactly', 'approximately'
    ]),
    "requirements": frozenset([
        'must', 'required', 'mandatory', 'optional', 'should', 'shall', 'need', 'necessary'
    ]),
    "policies": frozenset([
        'policy', 'rule', 'regulation', 'guideline', 'procedure', 'process', 'standard'
    ]),
    "penalties": frozenset([
        'penalty', 'fine', 'deduction', 'reduction', 'consequence', 'punishment'
    ]),
    "attendance": frozenset([
        'attendance', 'present', 'absent', 'participate', 'attend'
    ]),
    "notice": frozenset([
        'notice', 'notification', 'inform', 'alert', 'warning', 'advance'
    ]),
    "grades": frozenset([
        'grade', 'score', 'mark', 'point', 'percentage', 'gpa', 'evaluation'
    ]),
}

# Fragments must be longer than this (after trimming) to be considered
MIN_SEGMENT_LENGTH = 10


@dataclass(frozen=True)
class Segment:
    """
    A sentence judged topically relevant.

    position is the zero-based index of the sentence among all split
    fragments of the document.
    """
    text: str
    context: str
    position: int

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "context": self.context,
            "position": self.position,
        }


class SentenceExtractor:
    """
    Extract relevant sentences from plain text.

    Pure: the same text and label always produce the same segments.
    """

    def __init__(self, indicators: Mapping[str, FrozenSet[str]] = CONFLICT_INDICATORS):
        self.sentence_pattern = re.compile(r'[.!?]+')
        # Flattened once; order does not matter for a membership test
        self._keywords = tuple(
            keyword for keywords in indicators.values() for keyword in keywords
        )

    def extract(self, text: str, document_label: str) -> List[Segment]:
        """
        Extract relevant sentences from text.

        Args:
            text: Document text
            document_label: Name used in each segment's context label

        Returns:
            List of Segment objects in original sentence order
        """
        if not text or not text.strip():
            return []

        segments = []
        for index, fragment in enumerate(self.sentence_pattern.split(text)):
            sentence = fragment.strip()
            if len(sentence) <= MIN_SEGMENT_LENGTH:
                continue

            if not self.has_indicators(sentence):
                continue

            segments.append(Segment(
                text=sentence,
                context=f"Sentence {index + 1} in {document_label}",
                position=index
            ))

        return segments

    def has_indicators(self, sentence: str) -> bool:
        """Check if a sentence mentions any conflict indicator"""
        lowered = sentence.lower()
        return any(keyword in lowered for keyword in self._keywords)


# Singleton instance
_extractor = None

def get_extractor() -> SentenceExtractor:
    """Get singleton extractor instance"""
    global _extractor
    if _extractor is None:
        _extractor = SentenceExtractor()
    return _extractor


def extract_relevant_sentences(text: str, document_label: str) -> List[Segment]:
    """
    Convenience function to extract relevant sentences from text.

    Args:
        text: Document text
        document_label: Document name for context labels

    Returns:
        List of Segment objects
    """
    return get_extractor().extract(text, document_label)
