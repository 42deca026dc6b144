"""Resolution stages.

Each stage looks at one kind of evidence and returns a PartialResolution
(or None when it has nothing). Stages never see each other; the
resolver decides what to keep.

Stage order and confidences:
1. pattern       topic rules (exact 95, fuzzy <= 90)
2. host_email    host email local part -> coach (60)
3. participants  first non-coach attendee -> student (85 / <= 80 / raw 60),
                 attendee on a coach account -> coach (75)
4. transcript    personal rooms only, most frequent coach speaker (70),
                 student speaker labels and aliases (80)
5. chat          same as transcript over the chat log (coach 65, student 75)
6. folder        "Coach <Name>" segment and the segment after it
                 (coach 60, student 55, week 50)
7. fallback      nothing; unresolved fields stay Unknown
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog

from src.registry import Registries, RegistryEntry, normalize
from src.registry.registry import MIN_PARTIAL_LENGTH, contains_word
from src.resolution.patterns import (
    PatternExtractor,
    WeekExtractor,
    canonicalize,
    is_admin_account,
    is_personal_room,
)
from src.resolution.schemas import (
    UNKNOWN,
    ExtractionContext,
    ExtractionResult,
    PartialResolution,
    SourceTag,
    is_known,
)
from src.resolution.transcript import CoachScanner, StudentScanner

logger = structlog.get_logger()

HOST_EMAIL_CONFIDENCE = 60

PARTICIPANT_EXACT_CONFIDENCE = 85
PARTICIPANT_FUZZY_CAP = 80
PARTICIPANT_RAW_CONFIDENCE = 60
PARTICIPANT_COACH_CONFIDENCE = 75

TRANSCRIPT_CONFIDENCE = 80
TRANSCRIPT_COACH_CONFIDENCE = 70
CHAT_CONFIDENCE = 75
CHAT_COACH_CONFIDENCE = 65

FOLDER_COACH_CONFIDENCE = 60
FOLDER_STUDENT_CONFIDENCE = 55
FOLDER_WEEK_CONFIDENCE = 50

_PARENTHETICAL = re.compile(r"\([^)]*\)|\[[^\]]*\]")
_EMAIL_IN_TEXT = re.compile(r"\S+@\S+")
_NON_NAME_CHARS = re.compile(r"[^A-Za-z\s'\-]")
_COACH_SEGMENT = re.compile(r"\bcoach\s+(?P<name>[A-Za-z]+)", re.IGNORECASE)
_SEGMENT_WORDS = re.compile(r"[\s_]+")


def clean_name(raw: str | None) -> str:
    """Strip annotations, emails and punctuation from a display name."""
    if not raw:
        return ""
    text = _PARENTHETICAL.sub(" ", raw)
    text = _EMAIL_IN_TEXT.sub(" ", text)
    text = _NON_NAME_CHARS.sub(" ", text)
    return " ".join(text.split()).strip("'- ")


def email_domain(email: str | None) -> str:
    if not email or "@" not in email:
        return ""
    return email.rsplit("@", 1)[1].strip().lower()


class Stage(ABC):
    """One step of the resolution cascade.

    Attributes:
        source_tag: Tag recorded in the method trail
        targets: Result fields this stage can supply
    """

    source_tag: SourceTag
    targets: frozenset[str] = frozenset()

    def is_satisfied(self, current: ExtractionResult) -> bool:
        """True when every target field is already resolved."""
        for target in self.targets:
            if target == "week":
                if current.week is None:
                    return False
            elif not is_known(getattr(current, target)):
                return False
        return True

    @abstractmethod
    def attempt(
        self, ctx: ExtractionContext, current: ExtractionResult
    ) -> PartialResolution | None:
        """Look for evidence in ctx.

        Args:
            ctx: Recording metadata
            current: Fields merged from earlier stages

        Returns:
            PartialResolution, or None if nothing was found
        """


class PatternStage(Stage):
    source_tag = SourceTag.PATTERN
    targets = frozenset({"coach", "student", "week"})

    def __init__(self, extractor: PatternExtractor):
        self._extractor = extractor

    def attempt(self, ctx, current):
        partial = self._extractor.extract(ctx.topic)
        return None if partial.is_empty else partial


class HostEmailStage(Stage):
    source_tag = SourceTag.HOST_EMAIL
    targets = frozenset({"coach"})

    def __init__(self, registries: Registries, admin_owners: Sequence[str] = ()):
        self._coaches = registries.coaches
        self._admin_owners = tuple(admin_owners)

    def attempt(self, ctx, current):
        local_part = (ctx.host_email or "").split("@")[0]
        if is_admin_account(local_part, self._admin_owners):
            logger.debug("Host is an admin account", host_email=ctx.host_email)
            return None
        entry = self._coaches.lookup_email(ctx.host_email)
        if entry is None:
            return None
        logger.debug(
            "Coach found from host email",
            host_email=ctx.host_email,
            coach=entry.canonical_name,
        )
        return PartialResolution(
            source_tag=self.source_tag,
            coach=entry.canonical_name,
            coach_confidence=HOST_EMAIL_CONFIDENCE,
        )


class ParticipantStage(Stage):
    """Student by elimination: the first attendee who is not a coach."""

    source_tag = SourceTag.PARTICIPANTS
    targets = frozenset({"coach", "student"})

    def __init__(
        self,
        registries: Registries,
        coach_email_domains: Sequence[str],
        admin_owners: Sequence[str] = (),
    ):
        self._coaches = registries.coaches
        self._students = registries.students
        self._coach_domains = tuple(
            domain.lower().lstrip("@") for domain in coach_email_domains
        )
        self._admin_owners = tuple(admin_owners)

    def attempt(self, ctx, current):
        coach_entry = (
            self._coaches.lookup_full(current.coach) if current.coach_resolved else None
        )
        student_raw: str | None = None
        coach_found: str | None = None

        for participant in ctx.participants:
            name = clean_name(participant.name)
            if not name:
                continue
            if self._is_coach(name, participant.email, current.coach, coach_entry):
                if coach_found is None and not current.coach_resolved:
                    coach_found = self._coach_name(name, participant.email)
                continue
            if student_raw is None:
                student_raw = name

        values: dict = {}
        if coach_found:
            values["coach"] = coach_found
            values["coach_confidence"] = PARTICIPANT_COACH_CONFIDENCE
        if student_raw:
            student, confidence = canonicalize(
                self._students,
                student_raw,
                exact_confidence=PARTICIPANT_EXACT_CONFIDENCE,
                fuzzy_cap=PARTICIPANT_FUZZY_CAP,
            )
            if student == UNKNOWN:
                student, confidence = student_raw, PARTICIPANT_RAW_CONFIDENCE
            values["student"] = student
            values["student_confidence"] = confidence

        if not values:
            return None
        logger.debug("Participants resolved", **values)
        return PartialResolution(source_tag=self.source_tag, **values)

    def _is_coach(
        self,
        name: str,
        email: str | None,
        coach: str,
        coach_entry: RegistryEntry | None,
    ) -> bool:
        if self._on_coach_domain(email):
            return True
        if coach_entry is not None and self._coaches.mentions(name, coach_entry):
            return True
        if is_known(coach):
            lowered, coach_key = normalize(name), normalize(coach)
            if coach_key in lowered:
                return True
            if len(lowered) >= MIN_PARTIAL_LENGTH and lowered in coach_key:
                return True
        return self._coaches.lookup_full(name) is not None

    def _on_coach_domain(self, email: str | None) -> bool:
        domain = email_domain(email)
        return bool(domain) and any(
            domain == d or domain.endswith("." + d) for d in self._coach_domains
        )

    def _coach_name(self, name: str, email: str | None) -> str | None:
        if is_admin_account(name, self._admin_owners):
            return None
        entry = self._coaches.lookup_exact(name)
        local_part = (email or "").split("@")[0]
        if entry is None and not is_admin_account(local_part, self._admin_owners):
            entry = self._coaches.lookup_email(email)
        return entry.canonical_name if entry is not None else None


class _TextScanStage(Stage):
    """Personal-room topics only: look for the coach and student in free text.

    The coach is scanned for only while it is still unresolved; a coach
    found here is used to skip the coach's own lines in the student scan.
    """

    targets = frozenset({"coach", "student"})
    confidence: int
    coach_confidence: int

    def __init__(self, registries: Registries, personal_room_markers: Sequence[str]):
        self._coach_scanner = CoachScanner(registries.coaches)
        self._scanner = StudentScanner(registries.coaches, registries.students)
        self._markers = tuple(personal_room_markers)

    @abstractmethod
    def _text(self, ctx: ExtractionContext) -> str | None: ...

    def attempt(self, ctx, current):
        if not is_personal_room(ctx.topic, self._markers):
            return None
        text = self._text(ctx)

        values: dict = {}
        coach = current.coach
        if not current.coach_resolved:
            found = self._coach_scanner.find_coach(text)
            if found is not None:
                coach = found
                values["coach"] = found
                values["coach_confidence"] = self.coach_confidence

        if not current.student_resolved:
            student = self._scanner.find_student(text, coach)
            if student is not None:
                values["student"] = student
                values["student_confidence"] = self.confidence

        if not values:
            return None
        return PartialResolution(source_tag=self.source_tag, **values)


class TranscriptStage(_TextScanStage):
    source_tag = SourceTag.TRANSCRIPT
    confidence = TRANSCRIPT_CONFIDENCE
    coach_confidence = TRANSCRIPT_COACH_CONFIDENCE

    def _text(self, ctx):
        return ctx.transcript_text


class ChatStage(_TextScanStage):
    source_tag = SourceTag.CHAT
    confidence = CHAT_CONFIDENCE
    coach_confidence = CHAT_COACH_CONFIDENCE

    def _text(self, ctx):
        return ctx.chat_text


class FolderStage(Stage):
    """Walks folder names root to leaf.

    A coach segment is "Coach <Name>", contains a known-coach keyword,
    or is itself a coach name; the segment after it names the student
    when it is proper-cased and not archived (OLD_ prefix).
    """

    source_tag = SourceTag.FOLDER
    targets = frozenset({"coach", "student", "week"})

    def __init__(
        self,
        registries: Registries,
        known_coach_keywords: Sequence[str],
        week_extractor: WeekExtractor | None = None,
    ):
        self._coaches = registries.coaches
        self._students = registries.students
        self._keywords = tuple(k.lower() for k in known_coach_keywords if k)
        self._weeks = week_extractor or WeekExtractor()

    def attempt(self, ctx, current):
        segments = [s.strip() for s in ctx.folder_path if s and s.strip()]
        if not segments:
            return None

        values: dict = {}
        for i, segment in enumerate(segments):
            if "week" not in values:
                week = self._weeks.extract(segment)
                if week is not None:
                    values["week"] = week
                    values["week_confidence"] = FOLDER_WEEK_CONFIDENCE

            if "coach" in values:
                continue
            coach_raw = self._coach_in_segment(segment)
            if coach_raw is None:
                continue
            values["coach"] = self._canonical(self._coaches, coach_raw)
            values["coach_confidence"] = FOLDER_COACH_CONFIDENCE

            following = segments[i + 1] if i + 1 < len(segments) else None
            if following and self._looks_like_student(following):
                first_word = _SEGMENT_WORDS.split(following)[0]
                values["student"] = self._canonical(self._students, first_word)
                values["student_confidence"] = FOLDER_STUDENT_CONFIDENCE

        if not values:
            return None
        logger.debug("Folder path resolved", folder_path=segments, **values)
        return PartialResolution(source_tag=self.source_tag, **values)

    def _coach_in_segment(self, segment: str) -> str | None:
        match = _COACH_SEGMENT.search(segment)
        if match:
            return match.group("name")
        lowered = normalize(segment)
        for keyword in self._keywords:
            if contains_word(lowered, keyword):
                return keyword
        entry = self._coaches.lookup_full(segment)
        return entry.canonical_name if entry is not None else None

    def _looks_like_student(self, segment: str) -> bool:
        if segment.upper().startswith("OLD_"):
            return False
        if not re.match(r"^[A-Z][a-z]", segment):
            return False
        return self._coach_in_segment(segment) is None

    @staticmethod
    def _canonical(registry, raw: str) -> str:
        name, _confidence = canonicalize(registry, raw)
        return name if name != UNKNOWN else raw.capitalize()


class FallbackStage(Stage):
    """Marks the end of the cascade; unresolved fields stay Unknown."""

    source_tag = SourceTag.FALLBACK
    targets = frozenset({"coach", "student", "week"})

    def attempt(self, ctx, current):
        return PartialResolution(source_tag=self.source_tag)
