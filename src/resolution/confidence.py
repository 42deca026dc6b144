"""Overall confidence for a resolution result.

Scoring rules:
- Base score from the stage that first resolved a name
  (pattern 40; participants/transcript/chat 35; host_email/folder 30;
  fallback 0)
- +20 coach resolved, +20 student resolved, +10 week present,
  +10 session type other than MISC
- Cannot exceed 100
"""

from src.resolution.schemas import ExtractionResult, SessionType, SourceTag

BASE_SCORES: dict[SourceTag, int] = {
    SourceTag.PATTERN: 40,
    SourceTag.PARTICIPANTS: 35,
    SourceTag.TRANSCRIPT: 35,
    SourceTag.CHAT: 35,
    SourceTag.HOST_EMAIL: 30,
    SourceTag.FOLDER: 30,
    SourceTag.FALLBACK: 0,
}

COACH_BONUS = 20
STUDENT_BONUS = 20
WEEK_BONUS = 10
SESSION_TYPE_BONUS = 10


def calculate_score(
    resolved_by: SourceTag,
    coach_resolved: bool,
    student_resolved: bool,
    week_present: bool = False,
    session_type: SessionType = SessionType.MISC,
) -> int:
    """Calculate overall confidence (0-100).

    Args:
        resolved_by: First stage that supplied the coach or student
        coach_resolved: Coach is known
        student_resolved: Student is known
        week_present: A week was extracted
        session_type: Classified session type

    Returns:
        Score capped at 100
    """
    score = BASE_SCORES.get(resolved_by, 0)
    if coach_resolved:
        score += COACH_BONUS
    if student_resolved:
        score += STUDENT_BONUS
    if week_present:
        score += WEEK_BONUS
    if session_type not in (SessionType.MISC, SessionType.ADMIN):
        score += SESSION_TYPE_BONUS
    return min(score, 100)


class ConfidenceScorer:
    """Annotates results with a score and a manual-review flag."""

    def __init__(self, review_threshold: int = 60):
        self._review_threshold = review_threshold

    @property
    def review_threshold(self) -> int:
        return self._review_threshold

    def score(self, result: ExtractionResult) -> ExtractionResult:
        """Return a copy of result with score and requires_review set."""
        value = calculate_score(
            resolved_by=result.resolved_by,
            coach_resolved=result.coach_resolved,
            student_resolved=result.student_resolved,
            week_present=result.week is not None,
            session_type=result.session_type,
        )
        return result.model_copy(
            update={
                "score": value,
                "requires_review": value < self._review_threshold,
            }
        )
