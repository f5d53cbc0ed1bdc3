"""
Readability Calculator

Derives three closed-form readability scores from Text Metrics.

FORMULAS:
- Flesch Reading Ease:   206.835 - 1.015*L - 84.6*S    clamped to [0, 100]
- Flesch-Kincaid Grade:  0.39*L + 11.8*S - 15.59       floored at 0
- Automated Readability: 4.71*C + 0.5*L - 21.43        floored at 0

Where:
- L = words / sentences
- S = syllables / words
- C = non-whitespace characters / words

All scores are rounded half-up to one decimal place.
"""

import math
from typing import List

from ..models.schemas import ReadabilityReport, ReadabilityScore
from .text_metrics import TextMetrics, compute_metrics


# =============================================================================
# EXCEPTIONS
# =============================================================================

class InvalidInputError(Exception):
    """
    Raised when text has no countable words or sentences.

    Returned to the caller as-is; never retried.
    """
    def __init__(self, message: str, internal_reason: str = ""):
        self.message = message
        self.internal_reason = internal_reason
        super().__init__(message)


# =============================================================================
# SUMMARY BANDS (FLESCH READING EASE)
# =============================================================================

READING_EASE_BANDS = [
    (90, "Very easy to read (5th grade level)."),
    (80, "Easy to read (6th grade level)."),
    (70, "Fairly easy to read (7th grade level)."),
    (60, "Standard reading level (8th-9th grade)."),
    (50, "Fairly difficult to read (10th-12th grade)."),
    (30, "Difficult to read (college level)."),
]
HARDEST_BAND = "Very difficult to read (graduate level)."


def round_half_up(value: float, digits: int = 1) -> float:
    """Round away from zero on .5, unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _format_score(value: float) -> str:
    return f"{value:g}"


class ReadabilityCalculator:
    """
    Computes readability scores and a summary for a text snapshot.

    Stateless; one instance can be shared.
    """

    def calculate(self, text: str, document_id: str) -> ReadabilityReport:
        """
        Compute all three scores plus the summary.

        Raises:
            InvalidInputError: If the text has zero words or zero sentences
        """
        metrics = compute_metrics(text)
        scores = self.scores_from_metrics(metrics)

        return ReadabilityReport(
            document_id=document_id,
            readability_scores=scores,
            summary=self.summarize(scores, metrics),
            word_count=metrics.word_count,
            sentence_count=metrics.sentence_count,
            analysis_text_length=metrics.char_count,
        )

    def scores_from_metrics(self, metrics: TextMetrics) -> List[ReadabilityScore]:
        if metrics.word_count == 0 or metrics.sentence_count == 0:
            raise InvalidInputError(
                "Text has no complete sentences or words to analyze.",
                internal_reason=(
                    f"words={metrics.word_count} sentences={metrics.sentence_count}"
                ),
            )

        avg_sentence_length = metrics.word_count / metrics.sentence_count
        avg_syllables = metrics.syllable_count / metrics.word_count
        chars_per_word = metrics.non_whitespace_count / metrics.word_count

        reading_ease = 206.835 - (1.015 * avg_sentence_length) - (84.6 * avg_syllables)
        grade = (0.39 * avg_sentence_length) + (11.8 * avg_syllables) - 15.59
        ari = (4.71 * chars_per_word) + (0.5 * avg_sentence_length) - 21.43

        return [
            ReadabilityScore(
                score_type="flesch_reading_ease",
                score_value=round_half_up(max(0.0, min(100.0, reading_ease))),
            ),
            ReadabilityScore(
                score_type="flesch_kincaid_grade",
                score_value=round_half_up(max(0.0, grade)),
            ),
            ReadabilityScore(
                score_type="automated_readability",
                score_value=round_half_up(max(0.0, ari)),
            ),
        ]

    def summarize(self, scores: List[ReadabilityScore], metrics: TextMetrics) -> str:
        by_type = {s.score_type: s.score_value for s in scores}
        reading_ease = by_type["flesch_reading_ease"]
        grade = by_type["flesch_kincaid_grade"]

        parts = [
            f"Your text has {metrics.word_count} words in {metrics.sentence_count} sentences.",
            self.band_for(reading_ease),
            f"Reading ease score: {_format_score(reading_ease)}/100.",
            f"Grade level: {int(round_half_up(grade, 0))}.",
        ]

        if reading_ease < 60:
            parts.append(
                "Consider using shorter sentences and simpler words to improve readability."
            )
        elif reading_ease > 80:
            parts.append("Your writing is very accessible to most readers.")
        else:
            parts.append("Your writing has good readability for general audiences.")

        return " ".join(parts)

    @staticmethod
    def band_for(reading_ease: float) -> str:
        for threshold, label in READING_EASE_BANDS:
            if reading_ease >= threshold:
                return label
        return HARDEST_BAND
