"""Tests for letter-error analysis and focus-area rules."""

from typing_tutor.assessment.letters import (
    analyze_letter_errors,
    determine_next_focus_areas,
    round_half_up,
)
from typing_tutor.models.metrics import MistakePair
from typing_tutor.models.session import ContentType, SessionPerformance, TypingMistake


def mistakes(*pairs: tuple[str, str]) -> list[TypingMistake]:
    return [TypingMistake(expected=e, typed=t, position=i) for i, (e, t) in enumerate(pairs)]


def session(content_type: ContentType) -> SessionPerformance:
    return SessionPerformance(accuracy=90, speed=10, words_typed=5, content_type=content_type)


class TestAnalyzeLetterErrors:
    def test_no_mistakes(self):
        result = analyze_letter_errors([])
        assert result.weak == ()
        assert result.strong == ()
        assert result.common_mistakes == ()
        assert result.struggles_with_capitals is False

    def test_weak_strong_and_pairs(self):
        result = analyze_letter_errors(
            mistakes(("a", "s"), ("a", "s"), ("a", "s"), ("e", "r"), ("e", "r"), ("T", "t"))
        )
        assert result.weak == ("a", "e", "t")
        assert result.strong == ("b", "c", "d", "f", "g")
        assert result.common_mistakes == (
            MistakePair(source="a", typed="s", count=3),
            MistakePair(source="e", typed="r", count=2),
            MistakePair(source="t", typed="t", count=1),
        )
        # one capital out of six mistakes is under the 30% line
        assert result.struggles_with_capitals is False

    def test_top_five_only(self):
        result = analyze_letter_errors(mistakes(*[(ch, "x") for ch in "abcdefg"]))
        assert result.weak == ("a", "b", "c", "d", "e")
        assert len(result.common_mistakes) == 5

    def test_ties_keep_first_seen_order(self):
        result = analyze_letter_errors(mistakes(("z", "x"), ("m", "n"), ("m", "n"), ("z", "x")))
        assert result.weak == ("z", "m")

    def test_capitals_flag(self):
        result = analyze_letter_errors(mistakes(("A", "a"), ("A", "a"), ("b", "v")))
        assert result.struggles_with_capitals is True
        assert result.weak == ("a", "b")

    def test_numbers_flag(self):
        result = analyze_letter_errors(mistakes(("1", "2"), ("3", "4"), ("b", "v")))
        assert result.struggles_with_numbers is True
        assert result.struggles_with_punctuation is False

    def test_punctuation_flag(self):
        result = analyze_letter_errors(mistakes((".", ","), ("?", "/"), ("b", "v")))
        assert result.struggles_with_punctuation is True

    def test_exactly_thirty_percent_is_not_a_struggle(self):
        pairs = [("A", "a")] * 3 + [("b", "v")] * 7
        result = analyze_letter_errors(mistakes(*pairs))
        assert result.struggles_with_capitals is False


class TestDetermineNextFocusAreas:
    def test_priority_and_cap(self):
        errors = analyze_letter_errors(mistakes(("A", "a"), ("b", "v"), ("A", "s")))
        areas = determine_next_focus_areas(errors, 70.0, [session(ContentType.SENTENCES)])
        assert areas == ("Letters: a, b", "Slow down for accuracy", "Practice capital letters")

    def test_fast_learner(self):
        errors = analyze_letter_errors([])
        areas = determine_next_focus_areas(errors, 96.0, [session(ContentType.WORDS)])
        assert areas == ("Increase typing speed", "Ready for sentences")

    def test_no_word_practice(self):
        errors = analyze_letter_errors([])
        areas = determine_next_focus_areas(errors, 85.0, [session(ContentType.STORIES)])
        assert areas == ("Practice individual words",)

    def test_ready_for_stories(self):
        errors = analyze_letter_errors([])
        recent = [session(ContentType.WORDS), session(ContentType.SENTENCES)]
        assert determine_next_focus_areas(errors, 90.0, recent) == ("Ready for stories",)

    def test_nothing_to_suggest(self):
        errors = analyze_letter_errors([])
        recent = [session(ContentType.WORDS), session(ContentType.SENTENCES)]
        assert determine_next_focus_areas(errors, 85.0, recent) == ()


class TestHelpers:
    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(-2.5) == -2
