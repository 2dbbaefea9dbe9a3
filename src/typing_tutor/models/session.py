"""Typing session data models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ContentType(StrEnum):
    """Kinds of practice content, from simplest to most advanced."""

    WORDS = "words"
    SENTENCES = "sentences"
    STORIES = "stories"


class Difficulty(StrEnum):
    """Content difficulty tiers."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TypingMistake(BaseModel):
    """A single character the learner typed wrong."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    expected: str
    typed: str
    position: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)
    context: str | None = None  # word or sentence being typed


class SessionPerformance(BaseModel):
    """Summary of one completed practice item.

    Out-of-range values are rejected at construction time, so anything that
    reaches the history is already within bounds.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: datetime = Field(default_factory=datetime.now)
    accuracy: float = Field(ge=0, le=100)
    speed: float = Field(ge=0)  # WPM
    words_typed: int = Field(ge=0)
    mistakes: tuple[TypingMistake, ...] = ()
    content_type: ContentType = ContentType.WORDS
    difficulty: Difficulty = Difficulty.EASY

    @property
    def mistake_count(self) -> int:
        return len(self.mistakes)
