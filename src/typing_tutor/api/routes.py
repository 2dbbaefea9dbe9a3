"""REST API routes for learner progress."""

import re
from contextlib import AbstractContextManager

import structlog
from fastapi import APIRouter, HTTPException

from typing_tutor.api.registry import LearnerContext, get_registry
from typing_tutor.curriculum.levels import LEVELS
from typing_tutor.models.level import Level, ProgressStatus, SessionOutcome
from typing_tutor.models.metrics import SkillAssessment, SkillMetrics
from typing_tutor.models.session import SessionPerformance

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_PATTERN.match(user_id):
        raise HTTPException(status_code=400, detail="Invalid user ID format")
    return user_id


def _learner(user_id: str) -> AbstractContextManager[LearnerContext]:
    return get_registry().checkout(validate_user_id(user_id))


# Handlers are plain functions so FastAPI runs them in its threadpool;
# the learner checkout and file I/O block.


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/levels")
def list_levels() -> list[Level]:
    """Return the full level catalog in order."""
    return list(LEVELS)


@router.get("/users/{user_id}/status")
def get_status(user_id: str) -> ProgressStatus:
    """Current level, next level, progress and metrics for one learner."""
    with _learner(user_id) as learner:
        return learner.coordinator.status()


@router.post("/users/{user_id}/sessions")
def complete_session(user_id: str, performance: SessionPerformance) -> SessionOutcome:
    """Record a finished session and apply any level-up it earns."""
    with _learner(user_id) as learner:
        outcome = learner.coordinator.complete_session(performance)
    if outcome.level_up is not None and outcome.level_up.success:
        logger.info("learner_level_up", user_id=user_id, level=outcome.level_up.new_level.id)
    return outcome


@router.get("/users/{user_id}/metrics")
def get_metrics(user_id: str) -> SkillMetrics:
    with _learner(user_id) as learner:
        return learner.coordinator.assessment.calculate_metrics()


@router.get("/users/{user_id}/assessment")
def get_assessment(user_id: str) -> SkillAssessment:
    """Rule-based summary of strengths, weaknesses and next steps."""
    with _learner(user_id) as learner:
        level = learner.coordinator.levels.get_current_level()
        return learner.coordinator.assessment.generate_assessment(level.id, level.name)


@router.get("/users/{user_id}/recommendation")
def get_recommendation(user_id: str) -> dict:
    """Content type and difficulty to request from the content generator."""
    with _learner(user_id) as learner:
        levels = learner.coordinator.levels
        return {
            "level": levels.get_current_level().id,
            "content_type": levels.get_recommended_content_type().value,
            "difficulty": levels.get_recommended_difficulty().value,
        }


@router.delete("/users/{user_id}/progress")
def reset_progress(user_id: str) -> dict:
    """Send the learner back to level 1 and forget their history."""
    with _learner(user_id) as learner:
        learner.coordinator.reset()
    logger.info("learner_reset", user_id=user_id)
    return {"status": "reset"}
