"""Canonical identifier assembly.

Tokens, joined with "_":
    <prefix>[_<A|B|C>] <coach> <student> <week> <date> [M:<id>U:<uuid>]

Path-hostile characters are stripped from every token so the result can
be used directly as a folder or file name.
"""

import re
from datetime import datetime

import structlog

from src.naming.dates import normalize_session_date
from src.naming.schemas import CanonicalIdentifier
from src.resolution.schemas import ExtractionResult, SessionType, is_known

logger = structlog.get_logger()

UNKNOWN_COACH_TOKEN = "unknown"
UNKNOWN_TOKEN = "Unknown"
UNKNOWN_WEEK_TOKEN = "WkUnknown"

_PREFIXES: dict[SessionType, str] = {
    SessionType.GAMEPLAN: "GamePlan",
    SessionType.SAT: "SAT",
    SessionType.MISC: "MISC",
    SessionType.ADMIN: "MISC",
}
_DEFAULT_PREFIX = "Coaching"

# Session types whose identifiers never carry a week
_WEEKLESS = frozenset({SessionType.MISC, SessionType.ADMIN})

_PATH_HOSTILE = re.compile(r'[<>:"/\\|?*]')
_HEX_UUID = re.compile(
    r"^(?:[0-9a-f]{32}"
    r"|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$",
    re.IGNORECASE,
)


def sanitize(token: str | None) -> str:
    """Remove path-hostile characters and surrounding whitespace."""
    if not token:
        return ""
    return _PATH_HOSTILE.sub("", str(token)).strip()


def is_hex_uuid(uuid: str | None) -> bool:
    """True for 32-hex or dashed hex UUIDs (not the provider's base64 form)."""
    return bool(uuid) and _HEX_UUID.match(uuid.strip()) is not None


def data_source_indicator(source: str | None) -> str | None:
    """Map a data-source label to its one-letter indicator.

    A: zoom plus api, cloud or batch
    B: google or drive import
    C: webhook

    A is checked first, so "zoom-cloud-drive" is A.
    """
    if not source:
        return None
    label = source.strip().lower()
    if label in ("a", "b", "c"):
        return label.upper()
    if "zoom" in label and any(k in label for k in ("api", "cloud", "batch")):
        return "A"
    if "google" in label or "drive" in label:
        return "B"
    if "webhook" in label:
        return "C"
    return None


def week_token(week: int | str | None, session_type: SessionType) -> str:
    """Format a week: Wk07 for numbers, Wk2B for tags, WkUnknown otherwise."""
    if week is None or session_type in _WEEKLESS:
        return UNKNOWN_WEEK_TOKEN
    if isinstance(week, int) and not isinstance(week, bool):
        return f"Wk{week:02d}"
    text = sanitize(str(week)).replace(" ", "")
    if not text:
        return UNKNOWN_WEEK_TOKEN
    if text.isdigit():
        return f"Wk{int(text):02d}"
    return f"Wk{text}"


class IdentifierBuilder:
    """Builds CanonicalIdentifiers from resolution results."""

    def build(
        self,
        result: ExtractionResult | None,
        date: str | datetime | None = None,
        meeting_id: str | int | None = None,
        uuid: str | None = None,
        data_source: str | None = None,
    ) -> CanonicalIdentifier:
        """Assemble the identifier.

        Args:
            result: Resolved recording (None is treated as fully unknown)
            date: Recording start (ISO timestamp or parseable date)
            meeting_id: Provider meeting ID
            uuid: Provider recording UUID
            data_source: Source label ("zoom-api", "google-drive", "webhook")
                         or indicator letter

        Returns:
            CanonicalIdentifier; missing parts become Unknown tokens
        """
        if result is None:
            result = ExtractionResult()

        prefix = _PREFIXES.get(result.session_type, _DEFAULT_PREFIX)
        indicator = data_source_indicator(data_source)
        if indicator:
            prefix = f"{prefix}_{indicator}"

        coach = ""
        if is_known(result.coach):
            coach = sanitize("".join(result.coach.split()))
        student_words = (
            sanitize(result.student).split() if is_known(result.student) else []
        )
        date_token = sanitize(normalize_session_date(date)) or UNKNOWN_TOKEN

        tokens = [
            prefix,
            coach or UNKNOWN_COACH_TOKEN,
            student_words[0] if student_words else UNKNOWN_TOKEN,
            week_token(result.week, result.session_type),
            date_token,
        ]

        suffix = self._uniqueness_suffix(meeting_id, uuid)
        value = "_".join(tokens + [suffix] if suffix else tokens)

        return CanonicalIdentifier(
            value=value,
            session_type_prefix=tokens[0],
            coach_token=tokens[1],
            student_token=tokens[2],
            week_token=tokens[3],
            date_token=tokens[4],
            uniqueness_suffix=suffix,
        )

    def _uniqueness_suffix(
        self, meeting_id: str | int | None, uuid: str | None
    ) -> str | None:
        """M:<meetingId>U:<uuid>, only when both are present."""
        meeting = sanitize(str(meeting_id)) if meeting_id is not None else ""
        recording = sanitize(uuid)
        if not meeting or not recording:
            return None
        if is_hex_uuid(uuid):
            logger.warning(
                "Hex UUID used in identifier; provider base64 UUID expected",
                uuid=uuid,
                meeting_id=meeting,
            )
        return f"M:{meeting}U:{recording}"
