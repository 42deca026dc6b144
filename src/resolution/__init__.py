"""Coach/student/week resolution for session recordings.

This module provides:
- PatternExtractor: Ordered topic rules with registry canonicalization
- Stages: Host email, participants, transcript/chat, folder, fallback
- CascadingResolver: Runs the stages and merges their findings
- SessionTypeClassifier: Coaching / GamePlan / SAT / MISC rules
- ConfidenceScorer: Overall 0-100 score and review flag
"""

from src.resolution.classifier import SessionTypeClassifier
from src.resolution.confidence import ConfidenceScorer, calculate_score
from src.resolution.patterns import (
    PatternExtractor,
    PatternRule,
    PatternRuleError,
    WeekExtractor,
    parse_week,
)
from src.resolution.resolver import CascadingResolver
from src.resolution.schemas import (
    UNKNOWN,
    ExtractionContext,
    ExtractionResult,
    FieldConfidence,
    PartialResolution,
    Participant,
    SessionType,
    SourceTag,
)

__all__ = [
    "UNKNOWN",
    "CascadingResolver",
    "ConfidenceScorer",
    "ExtractionContext",
    "ExtractionResult",
    "FieldConfidence",
    "PartialResolution",
    "Participant",
    "PatternExtractor",
    "PatternRule",
    "PatternRuleError",
    "SessionType",
    "SessionTypeClassifier",
    "SourceTag",
    "WeekExtractor",
    "calculate_score",
    "parse_week",
]
