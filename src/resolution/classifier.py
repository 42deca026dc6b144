"""Session-type classification.

Ordered checks, first match wins:
(a) "game plan" in topic                      -> GamePlan (95)
(b) "sat prep" / "sat session" in topic       -> SAT (90)
(c) "test" anywhere in topic                  -> MISC (85)
(d) coach and student resolved                -> Coaching (90, 95 with hint)
(e) personal meeting room and coach resolved  -> Coaching (70)
(f) shorter than min_session_seconds          -> MISC (80)
(g) student unresolved                        -> MISC (60)
(h) otherwise                                 -> MISC (40)

A known pair is checked before duration, so a short coaching session is
never demoted to MISC.
"""

import re
from collections.abc import Sequence

from src.resolution.patterns import is_personal_room
from src.resolution.schemas import ExtractionContext, SessionType, is_known

_GAME_PLAN = re.compile(r"game[\s-]*plan", re.IGNORECASE)
_SAT = re.compile(r"\bsat\s*(?:prep|session)", re.IGNORECASE)


class SessionTypeClassifier:
    """Deterministic rule set mapping a recording to a SessionType."""

    def __init__(
        self,
        min_session_seconds: int = 300,
        personal_room_markers: Sequence[str] = (
            "personal meeting room",
            "'s zoom meeting",
        ),
    ):
        """Initialize classifier.

        Args:
            min_session_seconds: Recordings shorter than this are MISC
            personal_room_markers: Topic fragments marking a personal room
        """
        self._min_seconds = min_session_seconds
        self._markers = tuple(personal_room_markers)

    def classify(
        self,
        ctx: ExtractionContext,
        coach: str | None,
        student: str | None,
        hint: SessionType | None = None,
    ) -> tuple[SessionType, int]:
        """Classify one recording.

        Args:
            ctx: Recording metadata (topic, duration)
            coach: Resolved coach or "Unknown"
            student: Resolved student or "Unknown"
            hint: Session type suggested by the matched topic pattern

        Returns:
            Tuple of (session type, confidence 0-100)
        """
        topic = ctx.topic or ""

        if _GAME_PLAN.search(topic):
            return SessionType.GAMEPLAN, 95
        if _SAT.search(topic):
            return SessionType.SAT, 90
        if "test" in topic.lower():
            return SessionType.MISC, 85

        if is_known(coach) and is_known(student):
            return SessionType.COACHING, 95 if hint == SessionType.COACHING else 90
        if is_personal_room(topic, self._markers) and is_known(coach):
            return SessionType.COACHING, 70

        duration = ctx.duration_seconds
        if duration is not None and duration < self._min_seconds:
            return SessionType.MISC, 80
        if not is_known(student):
            return SessionType.MISC, 60
        return SessionType.MISC, 40
