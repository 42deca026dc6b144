"""CascadingResolver orchestrates multi-stage name resolution.

Resolution pipeline (in order):
1. Topic patterns
2. Host email
3. Participant elimination
4. Transcript scan (personal rooms)
5. Chat scan (personal rooms)
6. Folder hierarchy
7. Fallback

Stops as soon as coach and student are both known, then classifies the
session type and scores the result.
"""

from collections.abc import Sequence

import structlog

from src.config import Settings, get_settings
from src.registry import Registries
from src.resolution.classifier import SessionTypeClassifier
from src.resolution.confidence import ConfidenceScorer
from src.resolution.patterns import PatternExtractor
from src.resolution.schemas import (
    ExtractionContext,
    ExtractionResult,
    FieldConfidence,
    PartialResolution,
    SessionType,
    SourceTag,
    is_known,
)
from src.resolution.stages import (
    ChatStage,
    FallbackStage,
    FolderStage,
    HostEmailStage,
    ParticipantStage,
    PatternStage,
    Stage,
    TranscriptStage,
)

logger = structlog.get_logger()


def default_stages(registries: Registries, settings: Settings) -> list[Stage]:
    """Build the standard stage list in priority order."""
    return [
        PatternStage(
            PatternExtractor(registries, admin_owners=settings.admin_room_owners)
        ),
        HostEmailStage(registries, settings.admin_room_owners),
        ParticipantStage(
            registries, settings.coach_email_domains, settings.admin_room_owners
        ),
        TranscriptStage(registries, settings.personal_room_markers),
        ChatStage(registries, settings.personal_room_markers),
        FolderStage(registries, settings.known_coach_keywords),
        FallbackStage(),
    ]


class CascadingResolver:
    """Resolves coach, student, week and session type for one recording.

    Holds no per-call state; one instance can serve concurrent callers.
    """

    def __init__(
        self,
        registries: Registries,
        settings: Settings | None = None,
        stages: Sequence[Stage] | None = None,
        classifier: SessionTypeClassifier | None = None,
        scorer: ConfidenceScorer | None = None,
    ):
        """Initialize resolver with registries and components.

        Args:
            registries: Coach/student registry snapshot
            settings: Thresholds and domain lists (default: global settings)
            stages: Stages in priority order (default: standard cascade)
            classifier: Session-type classifier
            scorer: Confidence scorer
        """
        settings = settings or get_settings()
        self._registries = registries
        self._stages = tuple(stages or default_stages(registries, settings))
        self._classifier = classifier or SessionTypeClassifier(
            min_session_seconds=settings.min_session_seconds,
            personal_room_markers=settings.personal_room_markers,
        )
        self._scorer = scorer or ConfidenceScorer(settings.review_threshold)

    @property
    def registries(self) -> Registries:
        return self._registries

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    def resolve(self, ctx: ExtractionContext | None) -> ExtractionResult:
        """Resolve one recording.

        Never raises: a failing stage is logged and skipped, and missing
        input degrades to "Unknown" fields with low confidence.

        Args:
            ctx: Recording metadata (None is treated as empty)

        Returns:
            Fully populated ExtractionResult
        """
        if ctx is None:
            ctx = ExtractionContext()
        current = ExtractionResult()
        trail: list[SourceTag] = []
        resolved_by: SourceTag | None = None
        hint: SessionType | None = None

        for stage in self._stages:
            if current.is_resolved:
                break
            if stage.is_satisfied(current):
                continue

            trail.append(stage.source_tag)
            try:
                partial = stage.attempt(ctx, current)
            except Exception:
                logger.exception(
                    "Resolution stage failed", stage=stage.source_tag.value
                )
                continue
            if partial is None:
                continue

            if hint is None and partial.session_type_hint is not None:
                hint = partial.session_type_hint
            current, supplied_name = merge(current, partial)
            if supplied_name and resolved_by is None:
                resolved_by = partial.source_tag

        session_type, type_confidence = self._classifier.classify(
            ctx, current.coach, current.student, hint
        )
        result = current.model_copy(
            update={
                "session_type": session_type,
                "confidence": current.confidence.model_copy(
                    update={"session_type": type_confidence}
                ),
                "method_trail": tuple(trail),
                "resolved_by": resolved_by or SourceTag.FALLBACK,
            }
        )
        result = self._scorer.score(result)

        logger.info(
            "Recording resolved",
            topic=ctx.topic,
            coach=result.coach,
            student=result.student,
            week=result.week,
            session_type=result.session_type.value,
            score=result.score,
            method_trail=[tag.value for tag in result.method_trail],
        )
        return result


def merge(
    current: ExtractionResult, partial: PartialResolution
) -> tuple[ExtractionResult, bool]:
    """Fold a stage's findings into the running result.

    A field is only replaced when the new confidence is strictly higher.

    Returns:
        Tuple of (updated result, whether a coach or student was taken)
    """
    updates: dict = {}
    confidence = current.confidence.model_dump()

    for name in ("coach", "student"):
        value = getattr(partial, name)
        score = getattr(partial, f"{name}_confidence")
        if is_known(value) and score > confidence[name]:
            updates[name] = value
            confidence[name] = score
    supplied_name = bool(updates)

    if partial.week is not None and partial.week_confidence > confidence["week"]:
        updates["week"] = partial.week
        confidence["week"] = partial.week_confidence

    if not updates:
        return current, False
    updates["confidence"] = FieldConfidence(**confidence)
    return current.model_copy(update=updates), supplied_name
