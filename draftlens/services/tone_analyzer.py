"""
Tone Analyzer

Classifies the dominant tone of a text snapshot from lexicon matches plus
structural heuristics.

TONE CATEGORIES (enumeration order is the tie-break order):
- formal: Connectives and complex, passive constructions
- casual: Conversational words, contractions, short sentences
- confident: Certainty words, declarative statements
- friendly: Warm vocabulary, exclamations, questions
- professional: Business vocabulary and acronyms

SCORING:
- Every case-insensitive, whole-word lexicon match adds 5
- Each structural boost applies at most once per category
- Confidence = round(100 * max / sum), or 50 when nothing matched
"""

import math
import re
from dataclasses import dataclass
from typing import List, Tuple

from ..models.schemas import ToneResult, ToneScores
from .text_metrics import split_sentences_with_terminators, split_words


TONE_ORDER = ("formal", "casual", "confident", "friendly", "professional")

LEXICON_WEIGHT = 5

# Policy constant: confidence reported when no category scored at all.
# It is not derived from the text and does not vary with its length.
NEUTRAL_CONFIDENCE = 50


LEXICONS = {
    "formal": [
        'therefore', 'furthermore', 'consequently', 'nevertheless', 'moreover',
        'however', 'thus', 'hence', 'indeed', 'whereas', 'notwithstanding',
        'accordingly', 'subsequently', 'nonetheless', 'henceforth',
    ],
    "casual": [
        'yeah', 'okay', 'cool', 'awesome', 'totally', 'basically', 'actually',
        'like', 'you know', 'kinda', 'sorta', 'gonna', 'wanna', 'gotta',
    ],
    "confident": [
        'definitely', 'certainly', 'absolutely', 'clearly', 'obviously',
        'undoubtedly', 'surely', 'precisely', 'exactly', 'guaranteed',
        'proven', 'established', 'confident', 'assured', 'decisive',
    ],
    "friendly": [
        'thanks', 'please', 'welcome', 'appreciate', 'wonderful', 'great',
        'excellent', 'amazing', 'fantastic', 'love', 'enjoy', 'happy',
        'excited', 'delighted', 'pleased',
    ],
    "professional": [
        'regarding', 'concerning', 'pursuant', 'objective', 'analysis',
        'implementation', 'strategy', 'optimize', 'leverage', 'facilitate',
        'comprehensive', 'systematic', 'methodology', 'framework', 'initiative',
    ],
}

BUSINESS_TERMS = ['roi', 'kpi', 'synergy', 'stakeholder', 'deliverable', 'milestone']

PASSIVE_VOICE = re.compile(r'\b(?:was|were|is|are|been|being)\s+\w+ed\b', re.IGNORECASE)
CONTRACTION = re.compile(r"\b\w+['’](?:t|re|ve|ll|d)\b", re.IGNORECASE)

TONE_TEMPLATES = {
    "formal": "Your text uses sophisticated vocabulary and complex sentence structures.",
    "casual": "Your writing feels conversational and relaxed with informal expressions.",
    "confident": "Your writing conveys certainty and decisiveness in your statements.",
    "friendly": "Your text has a warm, approachable tone with positive language.",
    "professional": "Your writing maintains a business-appropriate, objective tone.",
}


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(r'\b' + re.escape(term) + r'\b', re.IGNORECASE)


COMPILED_LEXICONS = {
    tone: [_term_pattern(term) for term in terms]
    for tone, terms in LEXICONS.items()
}
# Plurals count ("stakeholders", "KPIs"); substrings inside other words don't.
COMPILED_BUSINESS_TERMS = [
    re.compile(r'\b' + re.escape(term) + r's?\b', re.IGNORECASE)
    for term in BUSINESS_TERMS
]


@dataclass
class StructuralSignals:
    """Boolean structural features of a text, computed once per analysis."""
    complex_sentences: bool
    passive_voice: bool
    contractions: bool
    short_sentences: bool
    declarative: bool
    exclamations: bool
    questions: bool
    business_terms: bool


class ToneAnalyzer:
    """
    Rule-based tone classifier over five fixed categories.

    Deterministic: identical text always yields identical scores.
    """

    def analyze(self, text: str, document_id: str) -> ToneResult:
        """
        Classify the tone of text.

        Returns the dominant tone, confidence, per-category scores and a
        one-paragraph summary.
        """
        sentences = split_sentences_with_terminators(text)
        signals = self._structural_signals(text, sentences)
        scores = self.score(text, signals)

        tone, confidence = self._determine_tone(scores)
        summary = self._summarize(tone, confidence, len(split_words(text)))

        return ToneResult(
            document_id=document_id,
            tone_detected=tone,
            confidence=confidence,
            scores=scores,
            summary=summary,
        )

    def score(self, text: str, signals: StructuralSignals) -> ToneScores:
        """Lexicon matches plus one-shot structural boosts per category."""
        lexical = {
            tone: self._count_matches(text, patterns)
            for tone, patterns in COMPILED_LEXICONS.items()
        }

        return ToneScores(
            formal=lexical["formal"]
            + (20 if signals.complex_sentences else 0)
            + (15 if signals.passive_voice else 0),
            casual=lexical["casual"]
            + (15 if signals.contractions else 0)
            + (10 if signals.short_sentences else 0),
            confident=lexical["confident"]
            + (15 if signals.declarative else 0),
            friendly=lexical["friendly"]
            + (10 if signals.exclamations else 0)
            + (5 if signals.questions else 0),
            professional=lexical["professional"]
            + (15 if signals.business_terms else 0),
        )

    def _count_matches(self, text: str, patterns: list) -> int:
        """Weighted total of whole-word matches for a list of patterns."""
        count = 0
        for pattern in patterns:
            count += len(pattern.findall(text))
        return count * LEXICON_WEIGHT

    def _structural_signals(
        self,
        text: str,
        sentences: List[Tuple[str, str]]
    ) -> StructuralSignals:
        bodies = [body for body, _ in sentences]

        if bodies:
            avg_words = sum(len(split_words(body)) for body in bodies) / len(bodies)
            short_sentences = avg_words < 12
            plain = [
                body for body, terminator in sentences
                if '?' not in terminator and '!' not in terminator
            ]
            # strictly more than 70% end without ? or !
            declarative = len(plain) * 10 > len(sentences) * 7
        else:
            short_sentences = False
            declarative = False

        return StructuralSignals(
            complex_sentences=any(len(body.split(',')) > 3 for body in bodies),
            passive_voice=bool(PASSIVE_VOICE.search(text)),
            contractions=bool(CONTRACTION.search(text)),
            short_sentences=short_sentences,
            declarative=declarative,
            exclamations='!' in text,
            questions='?' in text,
            business_terms=any(p.search(text) for p in COMPILED_BUSINESS_TERMS),
        )

    def _determine_tone(self, scores: ToneScores) -> Tuple[str, int]:
        """
        Pick the highest-scoring category.

        Ties go to the category listed first in TONE_ORDER.
        """
        values = [getattr(scores, tone) for tone in TONE_ORDER]
        max_score = max(values)
        dominant = TONE_ORDER[values.index(max_score)]

        total = sum(values)
        if total <= 0:
            return dominant, NEUTRAL_CONFIDENCE

        confidence = min(100, math.floor(100 * max_score / total + 0.5))
        return dominant, confidence

    def _summarize(self, tone: str, confidence: int, word_count: int) -> str:
        if confidence > 80:
            band = "high"
        elif confidence > 60:
            band = "moderate"
        else:
            band = "lower"

        return (
            f"Your writing has a {tone} tone with {band} confidence ({confidence}%). "
            f"{TONE_TEMPLATES[tone]} "
            f"Analysis based on {word_count} words."
        )
