"""Tests for RegistryLoader and RegistryProvider."""

import json
from pathlib import Path

import pytest

from src.registry import (
    RegistryKind,
    RegistryLoader,
    RegistryLoadError,
    RegistryProvider,
)
from src.registry.builtin import BUILTIN_COACHES, BUILTIN_STUDENTS

STUDENT_CSV = """\
Name,First Name,Last Name,Alternate Names,Parent Name,Parent Alternate Names,Email
Arshiya,Arshiya,Sharma,Arshya|Arshi,Neha Sharma,Neha,arshiya@example.com
,,,,,,
Kavya,Kavya,,,,,
"""


@pytest.fixture
def loader() -> RegistryLoader:
    return RegistryLoader()


@pytest.fixture
def student_csv(tmp_path: Path) -> Path:
    path = tmp_path / "students.csv"
    path.write_text(STUDENT_CSV, encoding="utf-8")
    return path


class TestCsvLoading:
    """Tests for CSV reference files."""

    def test_loads_rows_in_order(self, loader: RegistryLoader, student_csv: Path):
        """Rows with a name become entries; blank rows are ignored."""
        entries = loader.load(student_csv, RegistryKind.STUDENT)

        assert [e.canonical_name for e in entries] == ["Arshiya", "Kavya"]

    def test_parses_alias_lists(self, loader: RegistryLoader, student_csv: Path):
        """Alternate and parent names are split into sets."""
        entry = loader.load(student_csv, RegistryKind.STUDENT)[0]

        assert entry.aliases == frozenset({"Arshya", "Arshi"})
        assert entry.parent_aliases == frozenset({"Neha Sharma", "Neha"})
        assert entry.email == "arshiya@example.com"
        assert entry.last_name == "Sharma"

    def test_coach_files_ignore_parent_columns(
        self, loader: RegistryLoader, student_csv: Path
    ):
        """Parent columns only apply to students."""
        entry = loader.load(student_csv, RegistryKind.COACH)[0]

        assert entry.parent_aliases == frozenset()

    def test_headers_matched_loosely(self, loader: RegistryLoader, tmp_path: Path):
        """Header case, spaces and underscores do not matter."""
        path = tmp_path / "coaches.csv"
        path.write_text("NAME,first_name,ALIASES\nJuli,Juli,Julie;Jules\n")

        entry = loader.load(path, RegistryKind.COACH)[0]

        assert entry.canonical_name == "Juli"
        assert entry.first_name == "Juli"
        assert entry.aliases == frozenset({"Julie", "Jules"})

    def test_name_built_from_first_and_last(
        self, loader: RegistryLoader, tmp_path: Path
    ):
        """Without a Name column the first and last names are joined."""
        path = tmp_path / "coaches.csv"
        path.write_text("First Name,Last Name\nErin,Ye\n")

        entry = loader.load(path, RegistryKind.COACH)[0]

        assert entry.canonical_name == "Erin Ye"


class TestJsonLoading:
    """Tests for JSON reference files."""

    def test_loads_list_of_objects(self, loader: RegistryLoader, tmp_path: Path):
        """A JSON list of objects is accepted; list-valued aliases too."""
        path = tmp_path / "coaches.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "name": "Jenny",
                        "firstName": "Jenny",
                        "lastName": "Duan",
                        "aliases": ["JD"],
                    },
                    "not an object",
                ]
            )
        )

        entries = loader.load(path, RegistryKind.COACH)

        assert len(entries) == 1
        assert entries[0].full_name == "Jenny Duan"
        assert entries[0].aliases == frozenset({"JD"})

    def test_accepts_wrapped_list(self, loader: RegistryLoader, tmp_path: Path):
        """{"students": [...]} wrappers are unwrapped."""
        path = tmp_path / "students.json"
        path.write_text(json.dumps({"students": [{"name": "Huda"}]}))

        entries = loader.load(path, RegistryKind.STUDENT)

        assert [e.canonical_name for e in entries] == ["Huda"]

    def test_invalid_json_raises(self, loader: RegistryLoader, tmp_path: Path):
        """Unparsable JSON raises RegistryLoadError."""
        path = tmp_path / "students.json"
        path.write_text("{not json")

        with pytest.raises(RegistryLoadError):
            loader.load(path, RegistryKind.STUDENT)

    def test_missing_file_raises(self, loader: RegistryLoader, tmp_path: Path):
        """Missing files raise RegistryLoadError."""
        with pytest.raises(RegistryLoadError):
            loader.load(tmp_path / "absent.csv", RegistryKind.STUDENT)


class TestRegistryProvider:
    """Tests for snapshot loading, fallback and refresh."""

    def test_no_paths_uses_builtin_tables(self):
        """Unconfigured files fall back to the built-in tables."""
        provider = RegistryProvider()

        assert len(provider.current.coaches) == len(BUILTIN_COACHES)
        assert len(provider.current.students) == len(BUILTIN_STUDENTS)

    def test_missing_file_falls_back(self, tmp_path: Path):
        """A configured but missing file does not fail startup."""
        provider = RegistryProvider(student_path=tmp_path / "absent.csv")

        assert len(provider.current.students) == len(BUILTIN_STUDENTS)

    def test_empty_file_falls_back(self, tmp_path: Path):
        """A file with no usable rows falls back to the built-in table."""
        path = tmp_path / "students.csv"
        path.write_text("Name\n\n")

        provider = RegistryProvider(student_path=path)

        assert len(provider.current.students) == len(BUILTIN_STUDENTS)

    def test_loads_configured_file(self, student_csv: Path):
        """A readable file replaces the built-in table."""
        provider = RegistryProvider(student_path=student_csv)

        students = provider.current.students
        assert len(students) == 2
        assert students.lookup_exact("Neha").canonical_name == "Arshiya"

    def test_refresh_swaps_snapshot(self, tmp_path: Path):
        """refresh() builds a new snapshot and leaves the old one intact."""
        path = tmp_path / "students.csv"
        path.write_text("Name\nZed\n")
        provider = RegistryProvider(student_path=path)
        before = provider.current

        path.write_text("Name\nZed\nYara\n")
        after = provider.refresh()

        assert after is not before
        assert provider.current is after
        assert before.students.lookup_exact("Yara") is None
        assert after.students.lookup_exact("Yara").canonical_name == "Yara"

    def test_from_settings(self, settings, student_csv: Path):
        """Paths and threshold are read from Settings."""
        configured = settings.model_copy(update={"student_registry_path": student_csv})

        provider = RegistryProvider.from_settings(configured)

        assert len(provider.current.students) == 2
