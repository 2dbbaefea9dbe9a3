"""Rolling skill assessment over recorded typing sessions."""

import math
import statistics
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from typing_tutor.assessment.letters import (
    analyze_letter_errors,
    determine_next_focus_areas,
    round_half_up,
)
from typing_tutor.models.metrics import SkillAssessment, SkillMetrics
from typing_tutor.models.session import ContentType, SessionPerformance
from typing_tutor.storage.kv_store import KeyValueStore, StorageError

logger = structlog.get_logger()

STORAGE_KEY_PERFORMANCE = "typing_tutor_performance_history"
STORAGE_KEY_METRICS = "typing_tutor_skill_metrics"

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_RECENT_WINDOW = 10

# Readiness gate used by the metrics themselves
READY_MIN_ACCURACY = 85
READY_MIN_SESSIONS = 5
READY_MIN_CONSISTENCY = 70


class SkillAssessmentService:
    """Keeps the session history and derives SkillMetrics from it.

    The history is the only state. It is loaded from ``store`` once, capped
    at ``history_limit`` entries (oldest dropped first) and written back after
    every change. Storage failures are logged and never raised.

    Args:
        store: Where the history is persisted.
        history_limit: Maximum number of sessions kept.
        recent_window: Number of most recent sessions used for averages
            and consistency.
    """

    def __init__(
        self,
        store: KeyValueStore,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        recent_window: int = DEFAULT_RECENT_WINDOW,
    ):
        self.store = store
        self.history_limit = history_limit
        self.recent_window = recent_window
        self._history: list[SessionPerformance] = self._load_history()

    @property
    def history(self) -> list[SessionPerformance]:
        return list(self._history)

    def record_session(self, performance: SessionPerformance | Mapping[str, Any]) -> None:
        """Append a completed session to the history.

        Args:
            performance: The session summary. Mappings are validated into a
                SessionPerformance first.

        Raises:
            pydantic.ValidationError: If a mapping holds out-of-range values.
                Nothing is recorded in that case.
        """
        if not isinstance(performance, SessionPerformance):
            performance = SessionPerformance.model_validate(performance)

        self._history.append(performance)
        if len(self._history) > self.history_limit:
            del self._history[: len(self._history) - self.history_limit]

        logger.info(
            "session_recorded",
            accuracy=performance.accuracy,
            speed=performance.speed,
            mistakes=performance.mistake_count,
            history_size=len(self._history),
        )
        self._save_history()

    def calculate_metrics(self) -> SkillMetrics:
        """Compute a metrics snapshot from the current history."""
        if not self._history:
            return SkillMetrics()

        recent = self._history[-self.recent_window:]
        earliest = self._history[: self.recent_window]

        recent_accuracies = [s.accuracy for s in recent]
        avg_accuracy = statistics.fmean(recent_accuracies)
        avg_speed = statistics.fmean([s.speed for s in recent])

        total_words = sum(s.words_typed for s in self._history)
        total_sentences = sum(
            1 for s in self._history if s.content_type == ContentType.SENTENCES
        )

        all_mistakes = [m for s in self._history for m in s.mistakes]
        letter_errors = analyze_letter_errors(all_mistakes)

        old_avg = statistics.fmean([s.accuracy for s in earliest])
        improvement_rate = (avg_accuracy - old_avg) / old_avg * 100 if old_avg > 0 else 0.0

        # population standard deviation: divides by n, not n-1
        consistency = max(0.0, 100 - statistics.pstdev(recent_accuracies))

        ready = (
            avg_accuracy >= READY_MIN_ACCURACY
            and len(recent) >= READY_MIN_SESSIONS
            and consistency >= READY_MIN_CONSISTENCY
        )

        return SkillMetrics(
            average_accuracy=round_half_up(avg_accuracy, 1),
            average_speed=round_half_up(avg_speed, 1),
            total_words_typed=total_words,
            total_sentences_typed=total_sentences,
            sessions_completed=len(self._history),
            weak_letters=letter_errors.weak,
            strong_letters=letter_errors.strong,
            common_mistakes=letter_errors.common_mistakes,
            struggles_with_capitals=letter_errors.struggles_with_capitals,
            struggles_with_numbers=letter_errors.struggles_with_numbers,
            struggles_with_punctuation=letter_errors.struggles_with_punctuation,
            improvement_rate=round_half_up(improvement_rate, 1),
            consistency_score=int(round_half_up(consistency)),
            next_focus_areas=determine_next_focus_areas(letter_errors, avg_accuracy, recent),
            ready_for_next_level=ready,
        )

    @staticmethod
    def estimate_time_to_next_level(metrics: SkillMetrics) -> str:
        """Rough number of sessions until the readiness gate opens."""
        if metrics.ready_for_next_level:
            return "Ready now!"

        accuracy_gap = max(0.0, READY_MIN_ACCURACY - metrics.average_accuracy)
        consistency_gap = max(0, READY_MIN_CONSISTENCY - metrics.consistency_score)
        sessions_needed = math.ceil((accuracy_gap + consistency_gap) / 10)

        if sessions_needed <= 2:
            return "1-2 sessions"
        if sessions_needed <= 5:
            return "3-5 sessions"
        if sessions_needed <= 10:
            return "6-10 sessions"
        return "Keep practicing!"

    def generate_assessment(self, current_level: int, level_name: str) -> SkillAssessment:
        """Build a learner-facing summary of the current metrics.

        Args:
            current_level: Id of the learner's level.
            level_name: Display name of that level.

        Returns:
            SkillAssessment built from rules only.
        """
        metrics = self.calculate_metrics()

        if metrics.next_focus_areas:
            recommendations = list(metrics.next_focus_areas)
        else:
            recommendations = [
                "Keep practicing",
                "Try different content types",
                "Take breaks when needed",
            ]

        if metrics.strong_letters:
            strengths = [f"Good with letters: {', '.join(metrics.strong_letters)}"]
        else:
            strengths = ["Building foundations"]

        if metrics.weak_letters:
            areas = [f"Practice letters: {', '.join(metrics.weak_letters)}"]
        else:
            areas = ["Keep improving accuracy"]

        return SkillAssessment(
            current_level=current_level,
            level_name=level_name,
            metrics=metrics,
            analysis=(
                f"You've completed {metrics.sessions_completed} sessions with "
                f"{metrics.average_accuracy:.1f}% accuracy. Keep up the great work!"
            ),
            recommendations=recommendations,
            strengths=strengths,
            areas_to_improve=areas,
            estimated_time_to_next_level=self.estimate_time_to_next_level(metrics),
        )

    def clear_history(self) -> None:
        """Forget every recorded session."""
        self._history = []
        try:
            self.store.delete(STORAGE_KEY_PERFORMANCE)
            self.store.delete(STORAGE_KEY_METRICS)
        except StorageError as e:
            logger.error("performance_history_clear_failed", error=str(e))
        logger.info("performance_history_cleared")

    def _load_history(self) -> list[SessionPerformance]:
        try:
            stored = self.store.get(STORAGE_KEY_PERFORMANCE)
            if not stored:
                return []
            history = [SessionPerformance.model_validate(item) for item in stored]
        except (StorageError, ValidationError, TypeError) as e:
            logger.error("performance_history_load_failed", error=str(e))
            return []
        logger.debug("performance_history_loaded", sessions=len(history))
        return history[-self.history_limit:]

    def _save_history(self) -> None:
        try:
            self.store.set(
                STORAGE_KEY_PERFORMANCE,
                [s.model_dump(mode="json") for s in self._history],
            )
        except StorageError as e:
            logger.error("performance_history_save_failed", error=str(e))
