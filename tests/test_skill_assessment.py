"""Tests for SkillAssessmentService."""

import pytest
from pydantic import ValidationError

from typing_tutor.assessment.skill_assessment import (
    STORAGE_KEY_PERFORMANCE,
    SkillAssessmentService,
)
from typing_tutor.models.metrics import SkillMetrics
from typing_tutor.models.session import ContentType, SessionPerformance, TypingMistake
from typing_tutor.storage.kv_store import InMemoryStore, JsonFileStore, StorageError


def make_session(
    accuracy: float = 90.0,
    words_typed: int = 10,
    mistakes: tuple[tuple[str, str], ...] = (),
    content_type: ContentType = ContentType.WORDS,
    speed: float = 12.0,
) -> SessionPerformance:
    return SessionPerformance(
        accuracy=accuracy,
        speed=speed,
        words_typed=words_typed,
        mistakes=tuple(
            TypingMistake(expected=e, typed=t, position=i) for i, (e, t) in enumerate(mistakes)
        ),
        content_type=content_type,
    )


class BrokenStore(InMemoryStore):
    def get(self, key):
        raise StorageError("disk on fire")

    def set(self, key, value):
        raise StorageError("disk on fire")

    def delete(self, key):
        raise StorageError("disk on fire")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(store):
    return SkillAssessmentService(store)


class TestEmptyHistory:
    def test_default_metrics(self, service):
        metrics = service.calculate_metrics()
        assert metrics == SkillMetrics()
        assert metrics.average_accuracy == 0.0
        assert metrics.sessions_completed == 0
        assert metrics.consistency_score == 0
        assert metrics.weak_letters == ()
        assert metrics.ready_for_next_level is False
        assert metrics.next_focus_areas == (
            "Start with simple words",
            "Focus on accuracy first",
        )


class TestRecordSession:
    def test_history_capped_at_fifty(self, service):
        for i in range(60):
            service.record_session(make_session(accuracy=float(i)))
        history = service.history
        assert len(history) == 50
        assert history[0].accuracy == 10.0
        assert history[-1].accuracy == 59.0

    def test_custom_history_limit(self, store):
        service = SkillAssessmentService(store, history_limit=3)
        for i in range(5):
            service.record_session(make_session(accuracy=float(i)))
        assert [s.accuracy for s in service.history] == [2.0, 3.0, 4.0]

    def test_persisted_and_reloaded(self, store, service):
        service.record_session(make_session(mistakes=(("a", "s"),)))
        service.record_session(make_session(accuracy=80.0))

        reloaded = SkillAssessmentService(store)
        assert reloaded.history == service.history
        assert reloaded.calculate_metrics() == service.calculate_metrics()

    def test_accepts_mapping(self, service):
        service.record_session({
            "accuracy": 95,
            "speed": 20,
            "words_typed": 4,
            "content_type": "sentences",
            "difficulty": "medium",
        })
        assert service.history[0].content_type == ContentType.SENTENCES

    def test_rejects_out_of_range_mapping(self, service):
        with pytest.raises(ValidationError):
            service.record_session({"accuracy": 150, "speed": 10, "words_typed": 3})
        assert service.history == []

    @pytest.mark.parametrize("field", ["accuracy", "speed"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_rejects_non_finite_mapping(self, service, field, value):
        with pytest.raises(ValidationError):
            service.record_session({"accuracy": 90, "speed": 10, "words_typed": 3, field: value})
        assert service.history == []
        assert service.calculate_metrics() == SkillMetrics()

    @pytest.mark.parametrize(
        "fields",
        [
            {"accuracy": -1, "speed": 10, "words_typed": 3},
            {"accuracy": 50, "speed": -0.5, "words_typed": 3},
            {"accuracy": 50, "speed": 10, "words_typed": -3},
        ],
    )
    def test_session_validation(self, fields):
        with pytest.raises(ValidationError):
            SessionPerformance(**fields)

    def test_save_failure_keeps_memory_state(self):
        service = SkillAssessmentService(BrokenStore())
        service.record_session(make_session())
        assert len(service.history) == 1


class TestLoadFailures:
    def test_storage_error_falls_back_to_empty(self):
        service = SkillAssessmentService(BrokenStore())
        assert service.history == []

    def test_invalid_payload_falls_back_to_empty(self, store):
        store.set(STORAGE_KEY_PERFORMANCE, [{"accuracy": "lots"}])
        service = SkillAssessmentService(store)
        assert service.history == []

    def test_non_finite_payload_falls_back_to_empty(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY_PERFORMANCE}.json").write_text(
            '[{"accuracy": 90, "speed": Infinity, "words_typed": 3}]'
        )
        service = SkillAssessmentService(JsonFileStore(tmp_path))
        assert service.history == []
        assert service.calculate_metrics() == SkillMetrics()

    def test_non_list_payload_falls_back_to_empty(self, store):
        store.set(STORAGE_KEY_PERFORMANCE, 42)
        service = SkillAssessmentService(store)
        assert service.history == []


class TestCalculateMetrics:
    def test_five_steady_sessions_ready(self, service):
        for _ in range(5):
            service.record_session(make_session(accuracy=90.0, words_typed=10))
        metrics = service.calculate_metrics()
        assert metrics.average_accuracy == 90.0
        assert metrics.consistency_score == 100
        assert metrics.sessions_completed == 5
        assert metrics.total_words_typed == 50
        assert metrics.improvement_rate == 0.0
        assert metrics.ready_for_next_level is True
        assert metrics.next_focus_areas == ("Ready for sentences",)

    def test_four_sessions_not_ready(self, service):
        for _ in range(4):
            service.record_session(make_session(accuracy=100.0))
        assert service.calculate_metrics().ready_for_next_level is False

    def test_idempotent(self, service):
        service.record_session(make_session(accuracy=70.0, mistakes=(("a", "s"), ("B", "b"))))
        service.record_session(make_session(accuracy=85.0, mistakes=(("1", "2"),)))
        first = service.calculate_metrics()
        second = service.calculate_metrics()
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_recent_window_averages(self, service):
        for _ in range(10):
            service.record_session(make_session(accuracy=50.0, speed=5.0))
        for _ in range(10):
            service.record_session(make_session(accuracy=75.0, speed=15.0))
        metrics = service.calculate_metrics()
        assert metrics.average_accuracy == 75.0
        assert metrics.average_speed == 15.0
        assert metrics.improvement_rate == 50.0
        assert metrics.sessions_completed == 20

    def test_consistency_uses_population_stddev(self, service):
        service.record_session(make_session(accuracy=80.0))
        service.record_session(make_session(accuracy=100.0))
        assert service.calculate_metrics().consistency_score == 90

    def test_widest_swing(self, service):
        service.record_session(make_session(accuracy=0.0))
        service.record_session(make_session(accuracy=100.0))
        assert service.calculate_metrics().consistency_score == 50

    def test_improvement_rate_zero_when_start_is_zero(self, service):
        service.record_session(make_session(accuracy=0.0))
        assert service.calculate_metrics().improvement_rate == 0.0

    def test_averages_round_to_one_decimal(self, service):
        for accuracy in (90.0, 91.0, 91.0):
            service.record_session(make_session(accuracy=accuracy))
        assert service.calculate_metrics().average_accuracy == 90.7

    def test_sentence_sessions_counted(self, service):
        service.record_session(make_session(content_type=ContentType.SENTENCES))
        service.record_session(make_session(content_type=ContentType.SENTENCES))
        service.record_session(make_session(content_type=ContentType.STORIES))
        assert service.calculate_metrics().total_sentences_typed == 2

    def test_letter_analysis_uses_full_history(self, service):
        service.record_session(make_session(mistakes=(("q", "w"),) * 3))
        for _ in range(12):
            service.record_session(make_session())
        metrics = service.calculate_metrics()
        assert metrics.weak_letters == ("q",)
        assert metrics.common_mistakes[0].count == 3


class TestEstimateTimeToNextLevel:
    @pytest.mark.parametrize(
        ("accuracy", "consistency", "expected"),
        [
            (80.0, 60, "1-2 sessions"),
            (60.0, 70, "3-5 sessions"),
            (50.0, 40, "6-10 sessions"),
            (0.0, 0, "Keep practicing!"),
        ],
    )
    def test_buckets(self, accuracy, consistency, expected):
        metrics = SkillMetrics(average_accuracy=accuracy, consistency_score=consistency)
        assert SkillAssessmentService.estimate_time_to_next_level(metrics) == expected

    def test_ready_now(self):
        metrics = SkillMetrics(ready_for_next_level=True)
        assert SkillAssessmentService.estimate_time_to_next_level(metrics) == "Ready now!"


class TestGenerateAssessment:
    def test_new_learner(self, service):
        assessment = service.generate_assessment(1, "Keyboard Explorer")
        assert assessment.current_level == 1
        assert assessment.level_name == "Keyboard Explorer"
        assert assessment.recommendations == [
            "Start with simple words",
            "Focus on accuracy first",
        ]
        assert assessment.strengths == ["Building foundations"]
        assert assessment.areas_to_improve == ["Keep improving accuracy"]
        assert assessment.estimated_time_to_next_level == "Keep practicing!"
        assert "0 sessions" in assessment.analysis

    def test_with_mistakes(self, service):
        service.record_session(make_session(accuracy=75.0, mistakes=(("a", "s"), ("a", "q"))))
        assessment = service.generate_assessment(2, "Letter Master")
        assert assessment.areas_to_improve == ["Practice letters: a"]
        assert assessment.strengths == ["Good with letters: b, c, d, e, f"]
        assert "75.0% accuracy" in assessment.analysis


class TestClearHistory:
    def test_clears_memory_and_store(self, store, service):
        service.record_session(make_session())
        service.clear_history()
        assert service.history == []
        assert store.get(STORAGE_KEY_PERFORMANCE) is None
        assert SkillAssessmentService(store).history == []

    def test_clear_with_broken_store(self):
        service = SkillAssessmentService(BrokenStore())
        service.record_session(make_session())
        service.clear_history()
        assert service.history == []
