"""Level catalog and user progress models."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from typing_tutor.models.metrics import SkillMetrics
from typing_tutor.models.session import ContentType, Difficulty

# Ids of the seven catalog levels
LevelId = Annotated[int, Field(ge=1, le=7)]


class LevelRequirements(BaseModel):
    """Thresholds a learner must meet before leaving a level."""

    model_config = ConfigDict(frozen=True)

    min_accuracy: float
    min_sessions: int
    min_words_typed: int
    min_consistency: float
    specific_skills: tuple[str, ...] = ()


class ContentFocus(BaseModel):
    """Content available while at a level."""

    model_config = ConfigDict(frozen=True)

    types: tuple[ContentType, ...]
    difficulty: tuple[Difficulty, ...]
    recommended_difficulty: Difficulty
    focus_areas: tuple[str, ...] = ()


class LevelRewards(BaseModel):
    model_config = ConfigDict(frozen=True)

    badge: str
    celebration_message: str
    unlocks: tuple[str, ...] = ()


class Level(BaseModel):
    """One tier of the progression catalog."""

    model_config = ConfigDict(frozen=True)

    id: LevelId
    name: str
    title: str
    description: str
    icon: str
    color: str  # gradient classes used by the front end
    requirements: LevelRequirements
    content_focus: ContentFocus
    rewards: LevelRewards


class UserProgress(BaseModel):
    """The learner's position in the catalog."""

    current_level: LevelId = 1
    experience: int = 0
    experience_to_next_level: int = 100
    levels_completed: list[LevelId] = Field(default_factory=list)
    date_started_current_level: datetime = Field(default_factory=datetime.now)
    last_level_up_date: datetime | None = None


class AdvancementCheck(BaseModel):
    """Outcome of comparing metrics against the current level's requirements."""

    can_advance: bool
    missing_requirements: list[str] = Field(default_factory=list)
    message: str | None = None


class LevelUpResult(BaseModel):
    success: bool
    new_level: Level | None = None
    message: str


class SessionOutcome(BaseModel):
    """Everything the host needs to react to a finished session."""

    experience_earned: int
    metrics: SkillMetrics
    advancement: AdvancementCheck
    level_up: LevelUpResult | None = None


class ProgressStatus(BaseModel):
    current_level: Level
    next_level: Level | None
    progress: UserProgress
    progress_percentage: int
    metrics: SkillMetrics
