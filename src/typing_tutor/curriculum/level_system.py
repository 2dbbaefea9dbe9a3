"""Level progression state machine."""

from datetime import datetime

import structlog
from pydantic import ValidationError

from typing_tutor.assessment.letters import round_half_up
from typing_tutor.curriculum.levels import LEVELS, LEVELS_BY_ID
from typing_tutor.models.level import AdvancementCheck, Level, LevelUpResult, UserProgress
from typing_tutor.models.metrics import LevelMetrics, SkillMetrics
from typing_tutor.models.session import ContentType, Difficulty
from typing_tutor.storage.kv_store import KeyValueStore, StorageError

logger = structlog.get_logger()

STORAGE_KEY_PROGRESS = "typing_tutor_user_progress"

MAX_LEVEL_MESSAGE = "You have reached the maximum level!"
ALREADY_MAX_MESSAGE = "You are already at the maximum level!"

# Most advanced first
_CONTENT_PRECEDENCE = (ContentType.STORIES, ContentType.SENTENCES, ContentType.WORDS)

GateMetrics = SkillMetrics | LevelMetrics


class LevelSystem:
    """Owns the learner's level and gates advancement on metrics.

    Levels run 1 to 7 with no skipping and no way back. Level 7 is terminal.
    Progress is loaded from ``store`` on construction (fresh defaults if it
    is missing or unreadable) and saved after every mutation.

    Args:
        store: Where progress is persisted.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._progress = self._load_progress()

    def get_current_level(self) -> Level:
        return LEVELS_BY_ID[self._progress.current_level]

    def get_next_level(self) -> Level | None:
        """Level after the current one, or None at the top of the catalog."""
        return LEVELS_BY_ID.get(self.get_current_level().id + 1)

    def get_all_levels(self) -> tuple[Level, ...]:
        return LEVELS

    def get_level(self, level_id: int) -> Level | None:
        return LEVELS_BY_ID.get(level_id)

    def get_progress(self) -> UserProgress:
        return self._progress.model_copy(deep=True)

    def check_level_advancement(self, metrics: GateMetrics) -> AdvancementCheck:
        """Compare metrics with the current level's requirements.

        The thresholds for leaving level N live on level N itself.

        Args:
            metrics: Anything exposing average_accuracy, sessions_completed,
                total_words_typed and consistency_score.

        Returns:
            AdvancementCheck listing one message per unmet requirement.
        """
        if self.get_next_level() is None:
            return AdvancementCheck(can_advance=False, message=MAX_LEVEL_MESSAGE)

        req = self.get_current_level().requirements
        missing: list[str] = []

        if metrics.average_accuracy < req.min_accuracy:
            missing.append(
                f"Accuracy: {metrics.average_accuracy:.1f}% (need {req.min_accuracy:g}%)"
            )
        if metrics.sessions_completed < req.min_sessions:
            missing.append(f"Sessions: {metrics.sessions_completed} (need {req.min_sessions})")
        if metrics.total_words_typed < req.min_words_typed:
            missing.append(
                f"Words typed: {metrics.total_words_typed} (need {req.min_words_typed})"
            )
        if metrics.consistency_score < req.min_consistency:
            missing.append(
                f"Consistency: {metrics.consistency_score:g} (need {req.min_consistency:g})"
            )

        return AdvancementCheck(can_advance=not missing, missing_requirements=missing)

    def advance_level(self) -> LevelUpResult:
        """Move to the next level, or do nothing at the top of the catalog."""
        next_level = self.get_next_level()
        if next_level is None:
            return LevelUpResult(success=False, message=ALREADY_MAX_MESSAGE)

        now = datetime.now()
        old_level = self._progress.current_level
        self._progress.levels_completed.append(old_level)
        self._progress.current_level = next_level.id
        self._progress.experience = 0
        self._progress.date_started_current_level = now
        self._progress.last_level_up_date = now
        self._save_progress()

        logger.info("level_up", old_level=old_level, new_level=next_level.id, name=next_level.name)
        return LevelUpResult(
            success=True,
            new_level=next_level,
            message=next_level.rewards.celebration_message,
        )

    def add_experience(self, points: int) -> None:
        # Experience is not consulted by check_level_advancement
        self._progress.experience += points
        self._save_progress()

    @staticmethod
    def calculate_experience_points(accuracy: float, words_typed: int, mistake_count: int) -> int:
        """Score one session.

        Args:
            accuracy: Session accuracy percentage.
            words_typed: Words completed in the session.
            mistake_count: Number of mistakes made.

        Returns:
            Experience points earned.
        """
        xp = 10  # completion

        if accuracy >= 95:
            xp += 20
        elif accuracy >= 90:
            xp += 15
        elif accuracy >= 85:
            xp += 10
        elif accuracy >= 80:
            xp += 5

        xp += min(words_typed * 2, 50)

        if accuracy == 100:
            xp += 30

        if mistake_count == 0:
            xp += 20
        elif mistake_count <= 2:
            xp += 10

        return xp

    def get_recommended_content_type(self) -> ContentType:
        types = self.get_current_level().content_focus.types
        for content_type in _CONTENT_PRECEDENCE:
            if content_type in types:
                return content_type
        return ContentType.WORDS

    def get_recommended_difficulty(self) -> Difficulty:
        return self.get_current_level().content_focus.recommended_difficulty

    def is_content_type_unlocked(self, content_type: ContentType | str) -> bool:
        return content_type in self.get_current_level().content_focus.types

    def is_difficulty_unlocked(self, difficulty: Difficulty | str) -> bool:
        return difficulty in self.get_current_level().content_focus.difficulty

    def get_progress_percentage(self, metrics: GateMetrics) -> int:
        """Average of the four requirement ratios, each capped at 100%."""
        req = self.get_current_level().requirements
        ratios = (
            metrics.average_accuracy / req.min_accuracy,
            metrics.sessions_completed / req.min_sessions,
            metrics.total_words_typed / req.min_words_typed,
            metrics.consistency_score / req.min_consistency,
        )
        total = sum(min(ratio * 100, 100) for ratio in ratios) / len(ratios)
        return int(round_half_up(total))

    def reset_progress(self) -> None:
        self._progress = UserProgress()
        self._save_progress()
        logger.info("progress_reset", level=self._progress.current_level)

    def _load_progress(self) -> UserProgress:
        try:
            stored = self.store.get(STORAGE_KEY_PROGRESS)
            if stored:
                progress = UserProgress.model_validate(stored)
                logger.debug("user_progress_loaded", level=progress.current_level)
                return progress
        except (StorageError, ValidationError) as e:
            logger.error("user_progress_load_failed", error=str(e))
        return UserProgress()

    def _save_progress(self) -> None:
        try:
            self.store.set(STORAGE_KEY_PROGRESS, self._progress.model_dump(mode="json"))
        except StorageError as e:
            logger.error("user_progress_save_failed", error=str(e))
