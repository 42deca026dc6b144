"""Topic pattern extraction.

Rules are tried in order and the first regex that matches wins, so the
list encodes how specific each topic format is: explicit separators
("<>", "&") rank above a bare dash, and keyword topics ("Game Plan",
"SAT Prep") only set a session-type hint.

Every captured name is canonicalized through the registries (exact,
then fuzzy); a capture that matches no entry becomes "Unknown".
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from src.registry import Registries, Registry, normalize
from src.resolution.schemas import UNKNOWN, PartialResolution, SessionType, SourceTag

logger = structlog.get_logger()

EXACT_CONFIDENCE = 95
FUZZY_CONFIDENCE_CAP = 90
WEEK_CONFIDENCE = 90

MIN_WEEK = 1
MAX_WEEK = 52

# One or two words
_NAME = r"[A-Za-z]+(?:\s+[A-Za-z]+)?"

_WEEK_TAG = re.compile(r"\d+[A-Za-z]")
_NON_LETTER = re.compile(r"[^a-z]")

RULE_FIELDS = frozenset({"coach", "student", "week", "first", "second", "owner"})


class PatternRuleError(ValueError):
    """A pattern rule refers to capture groups its regex does not define."""


def parse_week(value) -> int | str | None:
    """Validate a raw week value.

    Purely numeric weeks must fall in [1, 52]; tags like "2B" are kept
    verbatim.

    Args:
        value: Captured week text or integer

    Returns:
        int week, str tag, or None if the value is not a usable week
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if MIN_WEEK <= value <= MAX_WEEK else None

    text = str(value).strip()
    if text.isdigit():
        number = int(text)
        return number if MIN_WEEK <= number <= MAX_WEEK else None
    if _WEEK_TAG.fullmatch(text):
        return text
    return None


class WeekExtractor:
    """Finds a week number or tag in free text.

    Patterns are tried in order: "Week N", "Wk N", "Session N", "#N".
    An out-of-range number moves on to the next candidate.
    """

    DEFAULT_PATTERNS: tuple[str, ...] = (
        r"(?<![a-z])week\s*#?\s*(\d+[a-z]?)(?![a-z0-9])",
        r"(?<![a-z])wk\s*#?\s*(\d+[a-z]?)(?![a-z0-9])",
        r"(?<![a-z])session\s*#?\s*(\d+[a-z]?)(?![a-z0-9])",
        r"#\s*(\d+[a-z]?)(?![a-z0-9])",
    )

    def __init__(self, patterns: Sequence[str] | None = None):
        self._patterns = tuple(
            re.compile(p, re.IGNORECASE) for p in (patterns or self.DEFAULT_PATTERNS)
        )

    def extract(self, text: str | None) -> int | str | None:
        if not text:
            return None
        for pattern in self._patterns:
            for match in pattern.finditer(text):
                week = parse_week(match.group(1))
                if week is not None:
                    return week
        return None


def is_personal_room(topic: str | None, markers: Sequence[str]) -> bool:
    """Whether the topic names a host's personal room rather than a session."""
    lowered = (topic or "").lower().replace("’", "'")
    return any(marker.lower() in lowered for marker in markers)


def is_admin_account(name: str | None, admin_owners: Sequence[str]) -> bool:
    """Whether a room owner or mailbox name is a shared admin account.

    Punctuation, digits and spaces are ignored, so "Ivy Level" and
    "ivy.level2" both match "ivylevel".
    """
    key = _NON_LETTER.sub("", normalize(name))
    if not key:
        return False
    return any(key == _NON_LETTER.sub("", normalize(owner)) for owner in admin_owners)


def canonicalize(
    registry: Registry,
    raw: str | None,
    exact_confidence: int = EXACT_CONFIDENCE,
    fuzzy_cap: int = FUZZY_CONFIDENCE_CAP,
) -> tuple[str, int]:
    """Map a raw name to its canonical form.

    Args:
        registry: Registry to search
        raw: Name as captured from the source
        exact_confidence: Confidence for an exact/containment hit
        fuzzy_cap: Upper bound for fuzzy-hit confidence

    Returns:
        Tuple of (canonical name, confidence) or ("Unknown", 0)
    """
    if not raw or not raw.strip():
        return UNKNOWN, 0

    entry = registry.lookup_exact(raw)
    if entry is not None:
        return entry.canonical_name, exact_confidence

    entry, score = registry.match_fuzzy(raw)
    if entry is not None:
        return entry.canonical_name, min(round(score * 100), fuzzy_cap)

    return UNKNOWN, 0


@dataclass(frozen=True)
class PatternRule:
    """One topic format.

    Attributes:
        name: Short label used in logs
        regex: Pattern matched case-insensitively against the topic
        field_map: Result field -> named capture group
        session_type_hint: Hint passed on to the classifier
        smart_roles: Decide which of "first"/"second" is the coach
        owner_field: Field holding a room owner, treated as the coach
        split_owner: Owner may be "<coach first name> <student>"
    """

    name: str
    regex: str
    field_map: Mapping[str, str] = field(default_factory=dict)
    session_type_hint: SessionType | None = None
    smart_roles: bool = False
    owner_field: str | None = None
    split_owner: bool = False
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.regex, re.IGNORECASE)
        except re.error as e:
            raise PatternRuleError(f"Rule {self.name!r}: invalid regex: {e}") from e

        unknown_fields = set(self.field_map) - RULE_FIELDS
        if unknown_fields:
            raise PatternRuleError(
                f"Rule {self.name!r}: unknown fields {sorted(unknown_fields)}"
            )
        missing = [g for g in self.field_map.values() if g not in compiled.groupindex]
        if missing:
            raise PatternRuleError(
                f"Rule {self.name!r}: regex has no group(s) {sorted(missing)}"
            )
        if self.smart_roles and not {"first", "second"} <= set(self.field_map):
            raise PatternRuleError(
                f"Rule {self.name!r}: smart roles need 'first' and 'second'"
            )
        if self.owner_field is not None and self.owner_field not in self.field_map:
            raise PatternRuleError(
                f"Rule {self.name!r}: owner field {self.owner_field!r} not mapped"
            )

        object.__setattr__(self, "compiled", compiled)

    def match(self, topic: str) -> dict[str, str] | None:
        """Return captured fields, or None if the regex does not match."""
        found = self.compiled.search(topic)
        if found is None:
            return None
        captures = {}
        for result_field, group in self.field_map.items():
            value = found.group(group)
            if value is not None and value.strip():
                captures[result_field] = value.strip()
        return captures


DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        name="student_ivylevel_week",
        regex=(
            rf"^(?P<student>{_NAME})\s*\|\s*IvyLevel\s+Week\s+"
            r"(?P<week>\d+[A-Za-z]?)"
        ),
        field_map={"student": "student", "week": "week"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="game_plan",
        regex=r"game[\s-]*plan",
        session_type_hint=SessionType.GAMEPLAN,
    ),
    PatternRule(
        name="sat",
        regex=r"\bSAT\s*(?:Prep|Session)",
        session_type_hint=SessionType.SAT,
    ),
    PatternRule(
        name="coach_student_session",
        regex=(
            rf"^(?:Ivylevel\s+)?(?P<coach>{_NAME})\s*<>\s*(?P<student>{_NAME})"
            r"\s*\|\s*Session\s*#?\s*(?P<week>\d+[A-Za-z]?)"
        ),
        field_map={"coach": "coach", "student": "student", "week": "week"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="coach_and_student_week",
        regex=(
            rf"^(?:Ivylevel\s+)?(?P<coach>[A-Za-z]+)\s*&\s*(?P<student>{_NAME})"
            r"\s*:\s*Week\s*(?P<week>\d+[A-Za-z]?)"
        ),
        field_map={"coach": "coach", "student": "student", "week": "week"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="double_arrow",
        regex=rf"^(?P<coach>{_NAME})\s*<->\s*(?P<student>{_NAME})",
        field_map={"coach": "coach", "student": "student"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="angle_brackets",
        regex=rf"^(?P<coach>{_NAME})\s*<>\s*(?P<student>{_NAME})",
        field_map={"coach": "coach", "student": "student"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="ampersand",
        regex=rf"^(?P<coach>{_NAME})\s*&\s*(?P<student>{_NAME})",
        field_map={"coach": "coach", "student": "student"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="dash",
        regex=rf"^(?P<coach>{_NAME})\s*[-–]\s*(?P<student>{_NAME})",
        field_map={"coach": "coach", "student": "student"},
        session_type_hint=SessionType.COACHING,
    ),
    PatternRule(
        name="name_and_name",
        regex=rf"^(?P<first>{_NAME})\s+and\s+(?P<second>{_NAME})",
        field_map={"first": "first", "second": "second"},
        session_type_hint=SessionType.COACHING,
        smart_roles=True,
    ),
    PatternRule(
        name="personal_meeting_room",
        regex=r"^(?P<owner>.+?)(?:'s|’s)\s+Personal\s+Meeting\s+Room$",
        field_map={"owner": "owner"},
        owner_field="owner",
        split_owner=True,
    ),
    PatternRule(
        name="zoom_meeting",
        regex=r"^(?P<owner>.+?)(?:'s|’s)\s+Zoom\s+Meeting$",
        field_map={"owner": "owner"},
        owner_field="owner",
    ),
)


class PatternExtractor:
    """Extracts coach, student, week and a session-type hint from a topic."""

    def __init__(
        self,
        registries: Registries,
        rules: Sequence[PatternRule] = DEFAULT_RULES,
        week_extractor: WeekExtractor | None = None,
        admin_owners: Sequence[str] = (),
    ):
        """Initialize extractor.

        Args:
            registries: Coach/student registries for canonicalization
            rules: Rules in priority order
            week_extractor: Fallback week parser for the whole topic
            admin_owners: Shared admin accounts whose rooms name no coach
        """
        self._registries = registries
        self._rules = tuple(rules)
        self._weeks = week_extractor or WeekExtractor()
        self._admin_owners = tuple(admin_owners)

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        return self._rules

    def extract(self, topic: str | None) -> PartialResolution:
        """Apply the first matching rule to a topic.

        Args:
            topic: Meeting topic

        Returns:
            PartialResolution tagged "pattern"; fields no rule supplied
            are left Unknown/None
        """
        text = " ".join((topic or "").split())
        values: dict = {}

        for rule in self._rules:
            captures = rule.match(text)
            if captures is None:
                continue
            logger.debug("Topic pattern matched", rule=rule.name, captures=captures)
            values = self._apply_rule(rule, captures)
            break

        if values.get("week") is None:
            week = self._weeks.extract(text)
            if week is not None:
                values["week"] = week
                values["week_confidence"] = WEEK_CONFIDENCE

        return PartialResolution(source_tag=SourceTag.PATTERN, **values)

    def _apply_rule(self, rule: PatternRule, captures: dict[str, str]) -> dict:
        values: dict = {"session_type_hint": rule.session_type_hint}

        if rule.smart_roles:
            coach_raw, student_raw = self._assign_roles(
                captures.get("first"), captures.get("second")
            )
            self._set_coach(values, coach_raw)
            self._set_student(values, student_raw)
        elif rule.owner_field is not None:
            self._apply_owner(values, captures.get(rule.owner_field), rule.split_owner)
        else:
            if "coach" in captures:
                self._set_coach(values, captures["coach"])
            if "student" in captures:
                self._set_student(values, captures["student"])

        week = parse_week(captures.get("week"))
        if week is not None:
            values["week"] = week
            values["week_confidence"] = WEEK_CONFIDENCE
        return values

    def _assign_roles(
        self, first: str | None, second: str | None
    ) -> tuple[str | None, str | None]:
        """Decide which of two names is the coach; returns (coach, student)."""
        coaches = self._registries.coaches
        students = self._registries.students
        first_is_coach = coaches.lookup_exact(first) is not None
        second_is_coach = coaches.lookup_exact(second) is not None
        first_is_student = students.lookup_exact(first) is not None
        second_is_student = students.lookup_exact(second) is not None

        if first_is_coach and second_is_student:
            return first, second
        if second_is_coach and first_is_student:
            return second, first
        if first_is_coach:
            return first, second
        if second_is_coach:
            return second, first
        # Neither is a known coach: student usually comes first
        return second, first

    def _apply_owner(self, values: dict, owner: str | None, split: bool) -> None:
        """Room owner is the coach; "Jenny Minseo" may carry a student too."""
        if not owner:
            return
        if is_admin_account(owner, self._admin_owners):
            logger.debug("Room owner is an admin account", owner=owner)
            return
        coaches = self._registries.coaches

        entry = coaches.lookup_full(owner)
        if entry is not None:
            values["coach"] = entry.canonical_name
            values["coach_confidence"] = EXACT_CONFIDENCE
            return

        words = owner.split()
        if split and len(words) >= 2:
            entry = coaches.lookup_full(words[0])
            if entry is not None:
                values["coach"] = entry.canonical_name
                values["coach_confidence"] = EXACT_CONFIDENCE
                remainder = " ".join(words[1:])
                own_names = {normalize(entry.last_name), normalize(entry.full_name)}
                if normalize(remainder) not in own_names:
                    self._set_student(values, remainder)
                return

        # Full or fuzzy match only, never containment
        entry, score = coaches.match_fuzzy(owner)
        if entry is not None:
            values["coach"] = entry.canonical_name
            values["coach_confidence"] = min(round(score * 100), FUZZY_CONFIDENCE_CAP)

    def _set_coach(self, values: dict, raw: str | None) -> None:
        name, confidence = canonicalize(self._registries.coaches, raw)
        values["coach"] = name
        values["coach_confidence"] = confidence

    def _set_student(self, values: dict, raw: str | None) -> None:
        name, confidence = canonicalize(self._registries.students, raw)
        values["student"] = name
        values["student_confidence"] = confidence
