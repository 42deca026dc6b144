"""Tests for SessionTypeClassifier."""

import pytest

from src.resolution.classifier import SessionTypeClassifier
from src.resolution.schemas import UNKNOWN, ExtractionContext, SessionType


@pytest.fixture
def classifier() -> SessionTypeClassifier:
    return SessionTypeClassifier()


class TestKeywordRules:
    """Topic keywords win over everything else."""

    @pytest.mark.parametrize("topic", ["Game Plan", "gameplan review", "GAME-PLAN"])
    def test_game_plan(self, classifier: SessionTypeClassifier, topic: str):
        """Game plan topics are GamePlan at 95."""
        ctx = ExtractionContext(topic=topic)

        assert classifier.classify(ctx, "Jenny", "Kavya") == (SessionType.GAMEPLAN, 95)

    @pytest.mark.parametrize("topic", ["SAT Prep", "sat session with Kabir"])
    def test_sat(self, classifier: SessionTypeClassifier, topic: str):
        """SAT prep/session topics are SAT at 90."""
        ctx = ExtractionContext(topic=topic)

        assert classifier.classify(ctx, UNKNOWN, UNKNOWN) == (SessionType.SAT, 90)

    def test_test_topic(self, classifier: SessionTypeClassifier):
        """Test recordings are MISC even with known names."""
        ctx = ExtractionContext(topic="Testing audio", duration_seconds=3600)

        assert classifier.classify(ctx, "Jenny", "Kavya") == (SessionType.MISC, 85)

    def test_test_inside_a_word(self, classifier: SessionTypeClassifier):
        """"test" inside a longer word still marks the topic MISC."""
        ctx = ExtractionContext(topic="Contest results review")

        assert classifier.classify(ctx, "Jenny", "Arshiya") == (SessionType.MISC, 85)


class TestNameRules:
    """Known names decide between Coaching and MISC."""

    def test_known_pair_with_hint(self, classifier: SessionTypeClassifier):
        """A coaching hint raises the confidence to 95."""
        ctx = ExtractionContext(topic="Jenny & Kavya")

        assert classifier.classify(
            ctx, "Jenny", "Kavya", SessionType.COACHING
        ) == (SessionType.COACHING, 95)

    def test_known_pair_without_hint(self, classifier: SessionTypeClassifier):
        """Without a hint the pair gives Coaching at 90."""
        assert classifier.classify(ExtractionContext(), "Jenny", "Kavya") == (
            SessionType.COACHING,
            90,
        )

    def test_short_known_pair_stays_coaching(self, classifier: SessionTypeClassifier):
        """Duration does not demote a known coach/student pair."""
        ctx = ExtractionContext(duration_seconds=60)

        session_type, _ = classifier.classify(ctx, "Jenny", "Kavya")

        assert session_type == SessionType.COACHING

    def test_personal_room_with_coach(self, classifier: SessionTypeClassifier):
        """A coach's personal room is Coaching at 70."""
        ctx = ExtractionContext(topic="Noor Hassan's Personal Meeting Room")

        assert classifier.classify(ctx, "Noor", UNKNOWN) == (SessionType.COACHING, 70)


class TestMiscRules:
    """Fallback MISC confidences."""

    def test_short_recording(self, classifier: SessionTypeClassifier):
        """Recordings under five minutes are MISC at 80."""
        ctx = ExtractionContext(duration_seconds=299)

        assert classifier.classify(ctx, "Jenny", UNKNOWN) == (SessionType.MISC, 80)

    def test_custom_minimum_duration(self):
        """The minimum duration is configurable."""
        classifier = SessionTypeClassifier(min_session_seconds=60)
        ctx = ExtractionContext(duration_seconds=120)

        assert classifier.classify(ctx, "Jenny", UNKNOWN) == (SessionType.MISC, 60)

    def test_student_unknown(self, classifier: SessionTypeClassifier):
        """No student gives MISC at 60."""
        ctx = ExtractionContext(duration_seconds=1800)

        assert classifier.classify(ctx, "Jenny", UNKNOWN) == (SessionType.MISC, 60)

    def test_coach_unknown(self, classifier: SessionTypeClassifier):
        """A student without a coach gives MISC at 40."""
        ctx = ExtractionContext(duration_seconds=1800)

        assert classifier.classify(ctx, UNKNOWN, "Kavya") == (SessionType.MISC, 40)
