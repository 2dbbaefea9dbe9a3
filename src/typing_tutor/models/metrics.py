"""Skill metric models derived from session history."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FOCUS_AREAS: tuple[str, ...] = ("Start with simple words", "Focus on accuracy first")


class MistakePair(BaseModel):
    """How often one expected character was typed as another."""

    model_config = ConfigDict(frozen=True)

    source: str
    typed: str
    count: int


class SkillMetrics(BaseModel):
    """Rolling performance snapshot; a pure function of the session history."""

    model_config = ConfigDict(frozen=True)

    # Overall performance
    average_accuracy: float = 0.0
    average_speed: float = 0.0
    total_words_typed: int = 0
    total_sentences_typed: int = 0
    sessions_completed: int = 0

    # Letter-specific
    weak_letters: tuple[str, ...] = ()
    strong_letters: tuple[str, ...] = ()
    common_mistakes: tuple[MistakePair, ...] = ()

    # Pattern analysis
    struggles_with_capitals: bool = False
    struggles_with_numbers: bool = False
    struggles_with_punctuation: bool = False

    # Learning trends
    improvement_rate: float = 0.0
    consistency_score: int = 0

    # Recommendations
    next_focus_areas: tuple[str, ...] = DEFAULT_FOCUS_AREAS
    ready_for_next_level: bool = False


class LevelMetrics(BaseModel):
    """The four aggregates the advancement gate looks at.

    SkillMetrics carries the same attributes, so either can be passed to
    LevelSystem.
    """

    model_config = ConfigDict(frozen=True)

    average_accuracy: float = 0.0
    sessions_completed: int = 0
    total_words_typed: int = 0
    consistency_score: float = 0.0


class SkillAssessment(BaseModel):
    """Learner-facing summary of the current metrics."""

    current_level: int
    level_name: str
    metrics: SkillMetrics
    analysis: str
    recommendations: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    areas_to_improve: list[str] = Field(default_factory=list)
    estimated_time_to_next_level: str = ""
