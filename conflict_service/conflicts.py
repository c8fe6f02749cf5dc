"""
Conflict Describer
==================

Turns raw detector matches into user-facing conflicts:
- PERCENTAGE: both statements quote a percentage
- TIME: both statements quote a clock time (H:MM)
- REQUIREMENT: either statement says "required"
- GENERAL: anything else

The first category that applies picks the description and the suggested
resolutions.
"""

import re
import uuid
import logging
from typing import List, Optional, Tuple
from dataclasses import dataclass

from .detector import ContradictionMatch
from .schemas import Conflict, ConflictingText

logger = logging.getLogger(__name__)


# =============================================================================
# Templates
# =============================================================================

@dataclass(frozen=True)
class ConflictTemplate:
    """Description and suggestions for one conflict category"""
    category: str
    description: str
    suggestions: Tuple[str, ...]


PERCENTAGE_TEMPLATE = ConflictTemplate(
    category="percentage",
    description="Conflicting percentage requirements found between documents",
    suggestions=(
        "Standardize percentage thresholds across documents",
        "Specify context for different percentages",
        "Review with the policy owner to confirm the correct value",
    ),
)

TIME_TEMPLATE = ConflictTemplate(
    category="time",
    description="Conflicting time requirements found between documents",
    suggestions=(
        "Standardize submission deadlines across all documents",
        "Create a master schedule document",
        "Add clarification notes for different contexts",
    ),
)

REQUIREMENT_TEMPLATE = ConflictTemplate(
    category="requirement",
    description="Conflicting requirements found between documents",
    suggestions=(
        "Clarify whether the requirement is mandatory or optional",
        "Align requirement wording across documents",
        "Document any exceptions explicitly",
    ),
)

GENERAL_TEMPLATE = ConflictTemplate(
    category="general",
    description="Potential inconsistency found between documents",
    suggestions=(
        "Review both statements for consistency",
        "Consolidate overlapping guidance into a single source",
        "Add cross-references between related sections",
    ),
)


class ConflictDescriber:
    """
    Picks a template for a match and builds the Conflict record.
    """

    def __init__(self):
        self.clock_time_pattern = re.compile(r'[0-9]{1,2}:[0-9]{2}')

    def template_for(self, text1: str, text2: str) -> ConflictTemplate:
        """Select the template that applies to a statement pair"""
        if '%' in text1 and '%' in text2:
            return PERCENTAGE_TEMPLATE

        if self.clock_time_pattern.search(text1) and self.clock_time_pattern.search(text2):
            return TIME_TEMPLATE

        if 'required' in text1.lower() or 'required' in text2.lower():
            return REQUIREMENT_TEMPLATE

        return GENERAL_TEMPLATE

    def describe(self, match: ContradictionMatch, conflict_id: Optional[str] = None) -> Conflict:
        """
        Build a Conflict from a detector match.

        Args:
            match: Detector match
            conflict_id: Optional fixed ID (random short hex otherwise)

        Returns:
            Conflict with description, suggestions and both conflicting texts
        """
        template = self.template_for(match.text1, match.text2)

        return Conflict(
            id=conflict_id or uuid.uuid4().hex[:9],
            type=match.type,
            severity=match.severity,
            documents=[match.document1, match.document2],
            description=template.description,
            suggestions=list(template.suggestions),
            conflicting_text=[
                ConflictingText(document=match.document1, text=match.text1, context=match.context1),
                ConflictingText(document=match.document2, text=match.text2, context=match.context2),
            ],
            confidence=match.confidence,
        )


# Singleton instance
_describer = None

def get_describer() -> ConflictDescriber:
    """Get singleton describer instance"""
    global _describer
    if _describer is None:
        _describer = ConflictDescriber()
    return _describer


def match_to_conflict(match: ContradictionMatch, conflict_id: Optional[str] = None) -> Conflict:
    """Convenience function to describe one match"""
    return get_describer().describe(match, conflict_id=conflict_id)


def matches_to_conflicts(matches: List[ContradictionMatch]) -> List[Conflict]:
    """Describe matches, keeping their order"""
    conflicts = [match_to_conflict(match) for match in matches]
    logger.debug(f"Described {len(conflicts)} conflicts")
    return conflicts
