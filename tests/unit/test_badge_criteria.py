"""Unit tests for badge criteria parsing and the default catalog."""

from learnpulse.engines.gamification.badges import (
    DEFAULT_BADGES,
    CourseCompletionCriteria,
    QuizCompletedCriteria,
    XPCriteria,
    parse_criteria,
)


class TestParseCriteria:

    def test_xp(self):
        criteria = parse_criteria({"type": "xp", "threshold": 100})
        assert isinstance(criteria, XPCriteria)
        assert criteria.threshold == 100

    def test_course_completion_default_count(self):
        criteria = parse_criteria({"type": "course_completion"})
        assert isinstance(criteria, CourseCompletionCriteria)
        assert criteria.count == 1

    def test_quiz_completed(self):
        criteria = parse_criteria({"type": "quiz_completed", "count": 5})
        assert isinstance(criteria, QuizCompletedCriteria)
        assert criteria.count == 5

    def test_unknown_type_never_matches(self):
        assert parse_criteria({"type": "streak", "days": 7}) is None

    def test_malformed_threshold(self):
        assert parse_criteria({"type": "xp", "threshold": "lots"}) is None

    def test_empty(self):
        assert parse_criteria({}) is None


class TestDefaultCatalog:

    def test_badge_ids_unique(self):
        ids = [spec.badge_id for spec in DEFAULT_BADGES]
        assert len(ids) == len(set(ids))

    def test_catalog_round_trips_through_parser(self):
        for spec in DEFAULT_BADGES:
            assert parse_criteria(spec.criteria.model_dump()) == spec.criteria
