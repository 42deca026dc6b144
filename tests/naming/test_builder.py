"""Tests for IdentifierBuilder."""

import pytest
from structlog.testing import capture_logs

from src.naming.builder import (
    IdentifierBuilder,
    data_source_indicator,
    is_hex_uuid,
    sanitize,
    week_token,
)
from src.resolution.schemas import ExtractionResult, SessionType


@pytest.fixture
def builder() -> IdentifierBuilder:
    return IdentifierBuilder()


def coaching(**overrides) -> ExtractionResult:
    fields = {
        "coach": "Jenny",
        "student": "Arshiya",
        "week": 16,
        "session_type": SessionType.COACHING,
    }
    fields.update(overrides)
    return ExtractionResult(**fields)


class TestBuild:
    """Tests for IdentifierBuilder.build."""

    def test_full_identifier(self, builder: IdentifierBuilder):
        """All tokens present, no suffix."""
        identifier = builder.build(coaching(), date="2025-01-07T10:00:00Z")

        assert identifier.value == "Coaching_Jenny_Arshiya_Wk16_2025-01-07"
        assert str(identifier) == identifier.value
        assert identifier.uniqueness_suffix is None

    def test_exposes_tokens(self, builder: IdentifierBuilder):
        """Each token is available separately."""
        identifier = builder.build(coaching(week=7), date="2025-01-07")

        assert identifier.session_type_prefix == "Coaching"
        assert identifier.coach_token == "Jenny"
        assert identifier.student_token == "Arshiya"
        assert identifier.week_token == "Wk07"
        assert identifier.date_token == "2025-01-07"

    def test_none_result_is_all_unknown(self, builder: IdentifierBuilder):
        """A missing result still produces an identifier."""
        identifier = builder.build(None)

        assert identifier.value == "MISC_unknown_Unknown_WkUnknown_Unknown"

    def test_coach_spaces_removed(self, builder: IdentifierBuilder):
        """Multi-word coach names are joined."""
        identifier = builder.build(coaching(coach="Jenny Duan"), date="2025-01-07")

        assert identifier.coach_token == "JennyDuan"

    def test_student_first_word_only(self, builder: IdentifierBuilder):
        """Only the student's first name is used."""
        identifier = builder.build(coaching(student="Priya Patel"), date="2025-01-07")

        assert identifier.student_token == "Priya"

    def test_path_hostile_characters_removed(self, builder: IdentifierBuilder):
        """Names never carry characters that break paths."""
        identifier = builder.build(
            coaching(coach="Je|nny", student="Ar<shi>ya"), date="2025-01-07"
        )

        assert identifier.value == "Coaching_Jenny_Arshiya_Wk16_2025-01-07"

    @pytest.mark.parametrize(
        "session_type,prefix",
        [
            (SessionType.COACHING, "Coaching"),
            (SessionType.GAMEPLAN, "GamePlan"),
            (SessionType.SAT, "SAT"),
            (SessionType.MISC, "MISC"),
            (SessionType.ADMIN, "MISC"),
        ],
    )
    def test_prefixes(
        self, builder: IdentifierBuilder, session_type: SessionType, prefix: str
    ):
        """Session type selects the prefix."""
        identifier = builder.build(coaching(session_type=session_type))

        assert identifier.session_type_prefix == prefix

    def test_indicator_appended_to_prefix(self, builder: IdentifierBuilder):
        """The data-source letter follows the prefix."""
        identifier = builder.build(
            coaching(), date="2025-01-07", data_source="google-drive"
        )

        assert identifier.value == "Coaching_B_Jenny_Arshiya_Wk16_2025-01-07"
        assert identifier.session_type_prefix == "Coaching_B"

    def test_bare_cloud_label_has_no_indicator(self, builder: IdentifierBuilder):
        """Cloud or batch labels without zoom leave the prefix bare."""
        identifier = builder.build(
            coaching(), date="2025-01-07", data_source="cloud_batch"
        )

        assert identifier.session_type_prefix == "Coaching"

    def test_unparseable_date_is_unknown(self, builder: IdentifierBuilder):
        """Missing dates become Unknown."""
        identifier = builder.build(coaching())

        assert identifier.date_token == "Unknown"


class TestUniquenessSuffix:
    """Tests for the M:<id>U:<uuid> suffix."""

    def test_suffix_with_both_ids(self, builder: IdentifierBuilder):
        """Meeting ID and UUID are appended as given."""
        identifier = builder.build(
            coaching(), date="2025-01-07", meeting_id=987, uuid="xYz+AB=="
        )

        assert identifier.uniqueness_suffix == "M:987U:xYz+AB=="
        assert identifier.value.endswith("_2025-01-07_M:987U:xYz+AB==")

    def test_no_suffix_without_uuid(self, builder: IdentifierBuilder):
        """Both parts are required."""
        identifier = builder.build(coaching(), date="2025-01-07", meeting_id=987)

        assert identifier.uniqueness_suffix is None
        assert identifier.value == "Coaching_Jenny_Arshiya_Wk16_2025-01-07"

    def test_suffix_parts_sanitized(self, builder: IdentifierBuilder):
        """Slashes in a base64 UUID are removed."""
        identifier = builder.build(coaching(), meeting_id="12", uuid="ab/c+d==")

        assert identifier.uniqueness_suffix == "M:12U:abc+d=="

    def test_hex_uuid_logs_warning(self, builder: IdentifierBuilder):
        """Hex UUIDs are accepted but flagged."""
        hex_uuid = "0123456789abcdef0123456789abcdef"

        with capture_logs() as logs:
            identifier = builder.build(coaching(), meeting_id=1, uuid=hex_uuid)

        assert identifier.uniqueness_suffix == f"M:1U:{hex_uuid}"
        assert [log["log_level"] for log in logs] == ["warning"]


class TestWeekToken:
    """Tests for week_token."""

    @pytest.mark.parametrize(
        "week,expected",
        [
            (7, "Wk07"),
            (16, "Wk16"),
            ("07", "Wk07"),
            ("2B", "Wk2B"),
            (None, "WkUnknown"),
            (" ", "WkUnknown"),
        ],
    )
    def test_coaching_weeks(self, week, expected: str):
        """Numbers are zero-padded; tags are kept."""
        assert week_token(week, SessionType.COACHING) == expected

    def test_misc_never_has_week(self):
        """MISC and Admin identifiers always use WkUnknown."""
        assert week_token(5, SessionType.MISC) == "WkUnknown"
        assert week_token(5, SessionType.ADMIN) == "WkUnknown"


class TestHelpers:
    """Tests for sanitize, is_hex_uuid and data_source_indicator."""

    def test_sanitize(self):
        """Path-hostile characters and outer spaces are removed."""
        assert sanitize(' a<b>c:d"e/f\\g|h?i*j ') == "abcdefghij"
        assert sanitize(None) == ""

    @pytest.mark.parametrize(
        "uuid,expected",
        [
            ("0123456789abcdef0123456789ABCDEF", True),
            ("01234567-89ab-cdef-0123-456789abcdef", True),
            ("xYz+AB==", False),
            (None, False),
        ],
    )
    def test_is_hex_uuid(self, uuid, expected: bool):
        """Only hex forms are detected."""
        assert is_hex_uuid(uuid) is expected

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("zoom-api", "A"),
            ("zoom-cloud", "A"),
            ("zoom_batch", "A"),
            ("zoom-cloud-drive", "A"),
            ("cloud_batch", None),
            ("zoom", None),
            ("api", None),
            ("google-drive", "B"),
            ("Drive Import", "B"),
            ("webhook", "C"),
            ("b", "B"),
            ("ftp", None),
            (None, None),
        ],
    )
    def test_data_source_indicator(self, source, expected):
        """Source labels map to A, B or C."""
        assert data_source_indicator(source) == expected
