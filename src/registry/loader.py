"""Loading coach/student reference tables from CSV or JSON files.

Expected columns/keys (matched case-insensitively, ignoring spaces,
underscores and dashes):
- Required: Name
- Optional: First Name, Last Name, Alternate Names, Parent Name,
  Parent Alternate Names, Email

Alternate-name lists may be delimited with '|', ';' or ','.
"""

import csv
import json
import re
from io import StringIO
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.registry.builtin import BUILTIN_COACHES, BUILTIN_STUDENTS
from src.registry.registry import Registries, Registry
from src.registry.schemas import RegistryEntry, RegistryKind
from src.registry.similarity import SimilarityMatcher

logger = structlog.get_logger()


class RegistryLoadError(Exception):
    """Raised when a reference file is missing or cannot be parsed."""


# Normalized header -> RegistryEntry field
_COLUMN_ALIASES: dict[str, str] = {
    "name": "name",
    "fullname": "name",
    "studentname": "name",
    "coachname": "name",
    "canonicalname": "name",
    "firstname": "first_name",
    "lastname": "last_name",
    "alternatenames": "aliases",
    "alternatename": "aliases",
    "aliases": "aliases",
    "nicknames": "aliases",
    "parentname": "parent_name",
    "guardianname": "parent_name",
    "parentalternatenames": "parent_aliases",
    "parentaliases": "parent_aliases",
    "email": "email",
    "emailaddress": "email",
}

_LIST_SPLIT = re.compile(r"[|;,]")


def _normalize_header(header: str) -> str:
    return re.sub(r"[\s_\-]+", "", header or "").lower()


def _split_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in value if v and str(v).strip()]
    return [part.strip() for part in _LIST_SPLIT.split(str(value)) if part.strip()]


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RegistryLoader:
    """Parses reference files into RegistryEntry lists.

    Malformed rows are skipped with a warning; a missing or unreadable
    file raises RegistryLoadError.
    """

    def load(self, path: str | Path, kind: RegistryKind) -> list[RegistryEntry]:
        """Load entries from a CSV or JSON file.

        Args:
            path: File path; format chosen by extension (.json, else CSV)
            kind: Coach or student table (parent columns apply to students)

        Returns:
            List of RegistryEntry objects, file order preserved

        Raises:
            RegistryLoadError: If the file is missing or cannot be parsed
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise RegistryLoadError(f"Registry file not found: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise RegistryLoadError(f"Cannot read {file_path}: {e}") from e

        if file_path.suffix.lower() == ".json":
            rows = self._parse_json(content, file_path)
        else:
            rows = self._parse_csv(content, file_path)

        # Parse entries (best effort - skip malformed rows)
        entries = []
        for row in rows:
            try:
                entry = self._entry_from_row(row, kind)
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(
                    "Skipping malformed registry row",
                    kind=kind.value,
                    row=row,
                    error=str(e),
                )
                continue
            if entry is not None:
                entries.append(entry)

        logger.info(
            "Registry file loaded",
            kind=kind.value,
            path=str(file_path),
            entries=len(entries),
        )
        return entries

    def _parse_csv(self, content: str, file_path: Path) -> list[dict]:
        try:
            reader = csv.DictReader(StringIO(content))
            rows = list(reader)
        except csv.Error as e:
            raise RegistryLoadError(f"Invalid CSV in {file_path}: {e}") from e
        if reader.fieldnames is None:
            raise RegistryLoadError(f"Empty CSV file: {file_path}")
        return rows

    def _parse_json(self, content: str, file_path: Path) -> list[dict]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise RegistryLoadError(f"Invalid JSON in {file_path}: {e}") from e
        if isinstance(data, dict):
            # Accept {"coaches": [...]} / {"students": [...]} wrappers
            data = next((v for v in data.values() if isinstance(v, list)), None)
        if not isinstance(data, list):
            raise RegistryLoadError(f"Expected a list of records in {file_path}")
        return [row for row in data if isinstance(row, dict)]

    def _entry_from_row(self, row: dict, kind: RegistryKind) -> RegistryEntry | None:
        """Map one raw row to an entry; rows without any name are ignored."""
        fields: dict[str, object] = {}
        for header, value in row.items():
            field = _COLUMN_ALIASES.get(_normalize_header(str(header or "")))
            if field and field not in fields:
                fields[field] = value

        first_name = _text(fields.get("first_name"))
        last_name = _text(fields.get("last_name"))
        name = _text(fields.get("name"))
        if name is None and first_name:
            name = f"{first_name} {last_name}" if last_name else first_name
        if name is None:
            return None

        parent_aliases: list[str] = []
        if kind is RegistryKind.STUDENT:
            parent_aliases = _split_list(fields.get("parent_name"))
            parent_aliases += _split_list(fields.get("parent_aliases"))

        return RegistryEntry(
            canonical_name=name,
            first_name=first_name,
            last_name=last_name,
            aliases=frozenset(_split_list(fields.get("aliases"))),
            parent_aliases=frozenset(parent_aliases),
            email=_text(fields.get("email")),
        )


class RegistryProvider:
    """Holds the current Registries snapshot.

    Snapshots are immutable; refresh() builds a new one and swaps the
    reference, so in-flight lookups keep using the snapshot they started
    with.
    """

    def __init__(
        self,
        coach_path: str | Path | None = None,
        student_path: str | Path | None = None,
        loader: RegistryLoader | None = None,
        fuzzy_threshold: float = 0.8,
    ):
        """Initialize and load the first snapshot.

        Args:
            coach_path: Coach reference file (CSV or JSON)
            student_path: Student reference file (CSV or JSON)
            loader: Loader to use (default RegistryLoader)
            fuzzy_threshold: Similarity threshold for fuzzy lookups
        """
        self._coach_path = coach_path
        self._student_path = student_path
        self._loader = loader or RegistryLoader()
        self._matcher = SimilarityMatcher(threshold=fuzzy_threshold)
        self._current = self._build()

    @classmethod
    def from_settings(cls, settings) -> "RegistryProvider":
        """Create a provider from application Settings."""
        return cls(
            coach_path=settings.coach_registry_path,
            student_path=settings.student_registry_path,
            fuzzy_threshold=settings.fuzzy_threshold,
        )

    @property
    def current(self) -> Registries:
        return self._current

    def refresh(self) -> Registries:
        """Reload both tables and atomically swap in the new snapshot."""
        snapshot = self._build()
        self._current = snapshot
        logger.info(
            "Registries refreshed",
            coaches=len(snapshot.coaches),
            students=len(snapshot.students),
        )
        return snapshot

    def _build(self) -> Registries:
        coaches = self._load_or_fallback(
            self._coach_path, RegistryKind.COACH, BUILTIN_COACHES
        )
        students = self._load_or_fallback(
            self._student_path, RegistryKind.STUDENT, BUILTIN_STUDENTS
        )
        return Registries(
            coaches=Registry(RegistryKind.COACH, coaches, self._matcher),
            students=Registry(RegistryKind.STUDENT, students, self._matcher),
        )

    def _load_or_fallback(
        self,
        path: str | Path | None,
        kind: RegistryKind,
        fallback: tuple[RegistryEntry, ...],
    ) -> list[RegistryEntry]:
        if path is None:
            logger.info(
                "No registry file configured, using built-in table",
                kind=kind.value,
            )
            return list(fallback)

        try:
            entries = self._loader.load(path, kind)
        except RegistryLoadError as e:
            logger.warning(
                "Registry load failed, using built-in table",
                kind=kind.value,
                path=str(path),
                error=str(e),
            )
            return list(fallback)

        if not entries:
            logger.warning(
                "Registry file has no usable rows, using built-in table",
                kind=kind.value,
                path=str(path),
            )
            return list(fallback)
        return entries
