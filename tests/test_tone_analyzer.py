"""
TONE ANALYZER TESTS

Lexicon scoring, structural boosts, tie-breaking and confidence.
"""

import pytest

from draftlens.models.schemas import ToneScores
from draftlens.services.tone_analyzer import ToneAnalyzer


@pytest.fixture
def analyzer():
    return ToneAnalyzer()


class TestDetermineTone:

    def test_nothing_matched_is_formal_at_fifty(self, analyzer):
        assert analyzer._determine_tone(ToneScores()) == ("formal", 50)

    def test_all_equal_goes_to_first_category(self, analyzer):
        scores = ToneScores(formal=10, casual=10, confident=10, friendly=10, professional=10)
        assert analyzer._determine_tone(scores) == ("formal", 20)

    def test_confident_beats_friendly_on_tie(self, analyzer):
        scores = ToneScores(confident=10, friendly=10)
        assert analyzer._determine_tone(scores) == ("confident", 50)

    def test_single_category_is_full_confidence(self, analyzer):
        assert analyzer._determine_tone(ToneScores(casual=15)) == ("casual", 100)


class TestAnalyze:

    def test_confident_and_friendly_tie(self, analyzer):
        text = (
            "We will definitely deliver the complete project on schedule for every "
            "single customer in the region this year. The results certainly speak for "
            "themselves across all the different teams that contributed to the effort!"
        )
        result = analyzer.analyze(text, "doc-1")

        assert result.scores.confident == 10
        assert result.scores.friendly == 10
        assert result.scores.casual == 0
        assert result.tone_detected == "confident"
        assert result.confidence == 50
        assert "lower confidence (50%)" in result.summary

    def test_casual(self, analyzer):
        result = analyzer.analyze("Yeah, it's gonna be awesome. We can't wait!", "doc-2")

        # 3 words + contraction + short sentences
        assert result.scores.casual == 40
        assert result.scores.friendly == 10
        assert result.scores.confident == 0
        assert result.tone_detected == "casual"
        assert result.confidence == 80
        assert "casual tone with moderate confidence (80%)" in result.summary

    def test_formal(self, analyzer):
        text = (
            "Therefore, the proposal was approved, the budget was finalized, the staff "
            "was informed, and the work began. Furthermore, the results were documented."
        )
        result = analyzer.analyze(text, "doc-3")

        # 2 words + complex sentence + passive voice
        assert result.scores.formal == 45
        assert result.scores.confident == 15
        assert result.tone_detected == "formal"

    def test_professional_with_business_plural(self, analyzer):
        text = (
            "Our stakeholders reviewed the KPI dashboard and the implementation "
            "strategy during the quarterly planning session with leadership."
        )
        result = analyzer.analyze(text, "doc-4")

        assert result.scores.professional == 25
        assert result.scores.confident == 15
        assert result.tone_detected == "professional"
        # 62.5 rounds up
        assert result.confidence == 63

    def test_whole_words_only(self, analyzer):
        result = analyzer.analyze(
            "Unlikely events are unlike anything seen before in history today", "doc-5"
        )
        # only the short-sentence boost; "like" inside other words does not count
        assert result.scores.casual == 10

    def test_business_terms_need_word_boundaries(self, analyzer):
        heroic = "The heroic team finished every task on the list before the end of the day."
        plural = "Our KPIs improved across every region this quarter."

        assert analyzer.analyze(heroic, "d").scores.professional == 0
        assert analyzer.analyze(plural, "d").scores.professional == 15

    def test_summary_mentions_word_count(self, analyzer):
        result = analyzer.analyze("Thanks so much, this is a wonderful surprise!", "doc-6")

        assert result.summary.endswith("Analysis based on 8 words.")
        assert result.document_id == "doc-6"

    def test_question_adds_five_to_friendly(self, analyzer):
        statement = "This is the right version of the quarterly report for the whole team."
        question = "Is this the right version of the quarterly report for the whole team?"

        assert analyzer.analyze(statement, "d").scores.friendly == 0
        assert analyzer.analyze(question, "d").scores.friendly == 5

    def test_question_boost_applies_once(self, analyzer):
        result = analyzer.analyze("Really? Truly? Honestly? Are you sure about it?", "d")
        assert result.scores.friendly == 5


class TestDeclarativeBoost:
    """Confident gains 15 only when strictly more than 70% of sentences are statements."""

    STATEMENT = "The report is ready."
    QUESTION = "Is it late?"

    def _text(self, statements, questions):
        return " ".join([self.STATEMENT] * statements + [self.QUESTION] * questions)

    def test_eight_of_ten_statements(self, analyzer):
        result = analyzer.analyze(self._text(8, 2), "d")
        assert result.scores.confident == 15
        assert result.scores.friendly == 5

    def test_exactly_seventy_percent_gets_nothing(self, analyzer):
        result = analyzer.analyze(self._text(7, 3), "d")
        assert result.scores.confident == 0
        assert result.scores.friendly == 5

    def test_only_questions(self, analyzer):
        assert analyzer.analyze(self._text(0, 4), "d").scores.confident == 0

    def test_exclamations_are_not_statements(self, analyzer):
        text = "The report is ready! The team is here! We start now."
        assert analyzer.analyze(text, "d").scores.confident == 0


class TestDeterminism:

    def test_deterministic(self, analyzer):
        text = "Please let me know if the strategy works for you. Thanks!"
        assert analyzer.analyze(text, "d") == analyzer.analyze(text, "d")
