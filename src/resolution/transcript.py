"""Coach and student scanning over transcript and chat text.

The coach is the registered coach who speaks most often.

The student takes two passes over the lines:
1. Speaker labels ("Name:", "00:01:02 - Name:", "From Name to Everyone:",
   "Name (Guest)") resolved exactly against the student registry,
   skipping anyone who is the coach.
2. Any line containing a known student alias as a whole word, unless the
   line also mentions the coach.

WEBVTT input is parsed with webvtt-py and caption voices are used as
speakers; zoom-style captions without voice tags fall back to the
label patterns.
"""

import re
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from io import StringIO

import structlog
import webvtt
from webvtt.errors import MalformedFileError

from src.registry import Registry, RegistryEntry, normalize
from src.registry.registry import find_alias_in_text
from src.resolution.schemas import UNKNOWN

logger = structlog.get_logger()

_MAX_SPEAKER_LENGTH = 60

# Order matters: timestamped and chat forms before the bare "Name:" form
_SPEAKER_PATTERNS = (
    re.compile(r"^\d{1,2}:\d{2}:\d{2}(?:\.\d+)?\s+-\s+(?P<name>[^:\t]+?)\s*:"),
    re.compile(r"^\d{1,2}:\d{2}:\d{2}(?:\.\d+)?\t(?P<name>[^:\t]+?)\s*:"),
    re.compile(r"^From\s+(?P<name>.+?)\s+to\s+(?:Everyone|Me)\b", re.IGNORECASE),
    re.compile(r"^(?P<name>[^:()\d][^:()]*?)\s*:\s*\S"),
    re.compile(r"^(?P<name>[^:()\d][^:()]*?)\s*\([^)]*\)"),
)

_VTT_TIMING = re.compile(r"-->")


@dataclass
class ScriptLine:
    """One line of transcript or chat text."""

    speaker: str | None
    text: str


def speaker_from_label(line: str) -> str | None:
    """Extract the speaker name from a labelled line, if any."""
    for pattern in _SPEAKER_PATTERNS:
        match = pattern.match(line)
        if match is None:
            continue
        name = match.group("name").strip()
        if name and len(name) <= _MAX_SPEAKER_LENGTH:
            return name
    return None


def iter_lines(text: str | None) -> Iterator[ScriptLine]:
    """Yield speaker-tagged lines from plain or WEBVTT text."""
    if not text or not text.strip():
        return

    if text.lstrip().startswith("WEBVTT"):
        try:
            captions = list(webvtt.from_buffer(StringIO(text), format="vtt"))
        except MalformedFileError as e:
            logger.debug("Malformed VTT, scanning raw lines", error=str(e))
        else:
            for caption in captions:
                for line in caption.text.splitlines():
                    line = line.strip()
                    if line:
                        yield ScriptLine(
                            speaker=caption.voice or speaker_from_label(line),
                            text=line,
                        )
            return

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line == "WEBVTT" or _VTT_TIMING.search(line):
            continue
        yield ScriptLine(speaker=speaker_from_label(line), text=line)


class StudentScanner:
    """Finds the first student named in transcript or chat text."""

    def __init__(self, coaches: Registry, students: Registry):
        self._coaches = coaches
        self._students = students

    def find_student(self, text: str | None, coach: str | None) -> str | None:
        """Scan text for a student.

        Args:
            text: Transcript or chat text
            coach: Canonical coach name, or Unknown/None

        Returns:
            Canonical student name or None
        """
        lines = list(iter_lines(text))
        if not lines:
            return None

        coach_entry = self._coaches.lookup_full(coach) if coach else None

        for line in lines:
            if line.speaker is None:
                continue
            if self._is_coach(line.speaker, coach, coach_entry):
                continue
            entry = self._students.lookup_full(line.speaker)
            if entry is not None:
                logger.debug(
                    "Student found from speaker label",
                    speaker=line.speaker,
                    student=entry.canonical_name,
                )
                return entry.canonical_name

        for line in lines:
            if self._mentions_coach(line.text, coach, coach_entry):
                continue
            found = find_alias_in_text(self._students, line.text)
            if found is not None:
                alias, entry = found
                logger.debug(
                    "Student alias found in text",
                    alias=alias,
                    student=entry.canonical_name,
                )
                return entry.canonical_name

        return None

    def _is_coach(
        self, speaker: str, coach: str | None, coach_entry: RegistryEntry | None
    ) -> bool:
        if self._mentions_coach(speaker, coach, coach_entry):
            return True
        return self._coaches.lookup_full(speaker) is not None

    def _mentions_coach(
        self, text: str, coach: str | None, coach_entry: RegistryEntry | None
    ) -> bool:
        if coach_entry is not None:
            return self._coaches.mentions(text, coach_entry)
        if coach and coach != UNKNOWN:
            return normalize(coach) in normalize(text)
        return False


class CoachScanner:
    """Finds the coach among the speakers of transcript or chat text."""

    def __init__(self, coaches: Registry):
        self._coaches = coaches

    def find_coach(self, text: str | None) -> str | None:
        """Return the coach with the most speaker lines.

        Ties go to the coach who spoke first.

        Args:
            text: Transcript or chat text

        Returns:
            Canonical coach name or None
        """
        counts: Counter[str] = Counter()
        for line in iter_lines(text):
            if line.speaker is None:
                continue
            entry = self._coaches.lookup_full(line.speaker)
            if entry is not None:
                counts[entry.canonical_name] += 1

        if not counts:
            return None
        coach, lines = counts.most_common(1)[0]
        logger.debug("Coach found from speaker labels", coach=coach, lines=lines)
        return coach
