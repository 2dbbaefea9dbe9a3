"""End-of-session flow tying assessment and level progression together."""

from collections.abc import Mapping
from typing import Any

import structlog

from typing_tutor.assessment.skill_assessment import SkillAssessmentService
from typing_tutor.curriculum.level_system import LevelSystem
from typing_tutor.models.level import ProgressStatus, SessionOutcome
from typing_tutor.models.session import SessionPerformance

logger = structlog.get_logger()


class ProgressionCoordinator:
    """Runs what the host does after every finished practice item.

    Record the session, award experience, recompute metrics and advance a
    level when the gate allows it.

    Args:
        assessment: The learner's SkillAssessmentService.
        levels: The learner's LevelSystem.
    """

    def __init__(self, assessment: SkillAssessmentService, levels: LevelSystem):
        self.assessment = assessment
        self.levels = levels

    def complete_session(
        self, performance: SessionPerformance | Mapping[str, Any]
    ) -> SessionOutcome:
        """Process one completed session.

        Args:
            performance: The session summary.

        Returns:
            SessionOutcome with the experience earned, fresh metrics, the
            advancement check and, when a level was gained, the level-up.
        """
        if not isinstance(performance, SessionPerformance):
            performance = SessionPerformance.model_validate(performance)

        # Validated above, so nothing from here on can raise
        self.assessment.record_session(performance)
        metrics = self.assessment.calculate_metrics()

        xp = self.levels.calculate_experience_points(
            accuracy=performance.accuracy,
            words_typed=performance.words_typed,
            mistake_count=performance.mistake_count,
        )
        self.levels.add_experience(xp)

        check = self.levels.check_level_advancement(metrics)

        level_up = None
        if check.can_advance:
            level_up = self.levels.advance_level()
        elif check.missing_requirements:
            logger.debug(
                "level_progress",
                level=self.levels.get_current_level().id,
                missing=check.missing_requirements[:2],
            )

        return SessionOutcome(
            experience_earned=xp,
            metrics=metrics,
            advancement=check,
            level_up=level_up,
        )

    def status(self) -> ProgressStatus:
        metrics = self.assessment.calculate_metrics()
        return ProgressStatus(
            current_level=self.levels.get_current_level(),
            next_level=self.levels.get_next_level(),
            progress=self.levels.get_progress(),
            progress_percentage=self.levels.get_progress_percentage(metrics),
            metrics=metrics,
        )

    def reset(self) -> None:
        """Start over at level 1 with an empty history."""
        self.levels.reset_progress()
        self.assessment.clear_history()
