"""Letter-level mistake analysis and focus-area rules."""

import math
import re
import string
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from typing_tutor.models.metrics import MistakePair
from typing_tutor.models.session import ContentType, SessionPerformance, TypingMistake

# A category "dominates" once it exceeds this share of all mistakes
STRUGGLE_THRESHOLD = 0.3

TOP_LETTERS = 5
TOP_MISTAKE_PAIRS = 5
MAX_FOCUS_AREAS = 3

_PUNCTUATION = re.compile(r"[.,!?;:]")


@dataclass(frozen=True)
class LetterErrors:
    """Result of analysing every recorded mistake."""

    weak: tuple[str, ...] = ()
    strong: tuple[str, ...] = ()
    common_mistakes: tuple[MistakePair, ...] = ()
    struggles_with_capitals: bool = False
    struggles_with_numbers: bool = False
    struggles_with_punctuation: bool = False


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a scoreboard does: 0.5 always goes up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def analyze_letter_errors(mistakes: Sequence[TypingMistake]) -> LetterErrors:
    """Count errors per expected letter and per (expected, typed) pair.

    Ties keep the order in which the letters or pairs were first seen.

    Args:
        mistakes: Every mistake in the history, oldest first.

    Returns:
        LetterErrors with the top offenders and the category flags.
    """
    if not mistakes:
        return LetterErrors()

    error_counts: Counter[str] = Counter()
    pair_counts: Counter[tuple[str, str]] = Counter()
    capital_errors = 0
    number_errors = 0
    punctuation_errors = 0

    for mistake in mistakes:
        expected = mistake.expected.lower()
        typed = mistake.typed.lower()
        error_counts[expected] += 1
        pair_counts[(expected, typed)] += 1

        if mistake.expected != expected:
            capital_errors += 1
        if any(ch.isdigit() for ch in mistake.expected):
            number_errors += 1
        if _PUNCTUATION.search(mistake.expected):
            punctuation_errors += 1

    # Counter.most_common is a stable sort over insertion order
    weak = tuple(letter for letter, _ in error_counts.most_common(TOP_LETTERS))
    strong = tuple(
        letter for letter in string.ascii_lowercase if error_counts.get(letter, 0) < 2
    )[:TOP_LETTERS]
    common = tuple(
        MistakePair(source=source, typed=typed, count=count)
        for (source, typed), count in pair_counts.most_common(TOP_MISTAKE_PAIRS)
    )

    limit = len(mistakes) * STRUGGLE_THRESHOLD
    return LetterErrors(
        weak=weak,
        strong=strong,
        common_mistakes=common,
        struggles_with_capitals=capital_errors > limit,
        struggles_with_numbers=number_errors > limit,
        struggles_with_punctuation=punctuation_errors > limit,
    )


def determine_next_focus_areas(
    letter_errors: LetterErrors,
    average_accuracy: float,
    recent_sessions: Iterable[SessionPerformance],
) -> tuple[str, ...]:
    """Pick up to three things to practise next, most important first."""
    focus_areas: list[str] = []

    if letter_errors.weak:
        focus_areas.append(f"Letters: {', '.join(letter_errors.weak[:3])}")

    if average_accuracy < 80:
        focus_areas.append("Slow down for accuracy")
    elif average_accuracy >= 95:
        focus_areas.append("Increase typing speed")

    if letter_errors.struggles_with_capitals:
        focus_areas.append("Practice capital letters")

    content_types = {s.content_type for s in recent_sessions}
    has_words = ContentType.WORDS in content_types
    has_sentences = ContentType.SENTENCES in content_types

    if not has_words:
        focus_areas.append("Practice individual words")
    elif not has_sentences and average_accuracy >= 85:
        focus_areas.append("Ready for sentences")
    elif has_sentences and average_accuracy >= 90:
        focus_areas.append("Ready for stories")

    return tuple(focus_areas[:MAX_FOCUS_AREAS])
