"""
Document Analyzer

Runs every analysis for one AnalysisRequest and bundles the results.

- Suggestions: always (text is non-empty by the time we get here)
- Tone: only when the snapshot meets the tone minimum length
- Readability: only when it meets the readability minimum and has at
  least one word and one sentence

Tone and readability are synchronous and side-effect free, so they run
inline after the (async) suggestion pipeline.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.schemas import DocumentAnalysis, ReadabilityReport
from .input_validator import InputValidator
from .readability import InvalidInputError, ReadabilityCalculator
from .suggestion_engine import SuggestionEngine
from .tone_analyzer import ToneAnalyzer


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisRequest:
    """One edit's snapshot. generation increases with every edit to a document."""
    text: str
    document_id: str
    generation: int


class DocumentAnalyzer:
    """Produces a DocumentAnalysis for a request."""

    def __init__(
        self,
        suggestion_engine: SuggestionEngine,
        tone_analyzer: Optional[ToneAnalyzer] = None,
        readability: Optional[ReadabilityCalculator] = None,
        validator: Optional[InputValidator] = None
    ):
        self.suggestion_engine = suggestion_engine
        self.tone_analyzer = tone_analyzer or ToneAnalyzer()
        self.readability = readability or ReadabilityCalculator()
        self.validator = validator or InputValidator()

    async def analyze(self, request: AnalysisRequest) -> DocumentAnalysis:
        suggestions = await self.suggestion_engine.suggest(request.text, request.document_id)

        tone = None
        if self.validator.meets_minimum(request.text, "tone"):
            tone = self.tone_analyzer.analyze(request.text, request.document_id)

        return DocumentAnalysis(
            document_id=request.document_id,
            generation=request.generation,
            suggestions=suggestions.suggestions,
            degraded=suggestions.degraded,
            tone=tone,
            readability=self._readability(request),
        )

    def _readability(self, request: AnalysisRequest) -> Optional[ReadabilityReport]:
        if not self.validator.meets_minimum(request.text, "readability"):
            return None
        try:
            return self.readability.calculate(request.text, request.document_id)
        except InvalidInputError as e:
            logger.debug(
                "Document %s generation %d: no readability (%s)",
                request.document_id, request.generation, e.internal_reason
            )
            return None
