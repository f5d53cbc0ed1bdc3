"""
Pydantic models for request/response validation.
Used across all analysis components.
"""

from pydantic import BaseModel, Field
from typing import Optional, Literal


IssueType = Literal["grammar", "spelling", "style", "clarity"]
SuggestionSource = Literal["remote", "local"]
ToneCategory = Literal["formal", "casual", "confident", "friendly", "professional"]
ScoreType = Literal["flesch_reading_ease", "flesch_kincaid_grade", "automated_readability"]
CoordinatorStateName = Literal["idle", "pending", "running", "closed"]


# ============================================================================
# Input Models
# ============================================================================

class AnalysisRequestBody(BaseModel):
    """
    Request to analyze a text snapshot of a document.

    Length limits are enforced by InputValidator so that callers get a
    readable 400 instead of a schema error.
    """
    text: str = Field(..., description="Immutable snapshot of the document text")
    document_id: str = Field(..., description="Opaque document identifier")

    class Config:
        extra = "forbid"


class EditRequestBody(BaseModel):
    """A new edit to an open document session."""
    text: str

    class Config:
        extra = "forbid"


# ============================================================================
# Suggestion Models
# ============================================================================

class Suggestion(BaseModel):
    """
    A grammar/spelling suggestion over a character span of the analyzed text.

    Offsets are Python string indices into the exact text that was analyzed:
    0 <= start <= end <= len(text).
    """
    id: str
    document_id: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    issue_type: IssueType
    original_text: str
    suggested_text: str
    explanation: str
    source: SuggestionSource


class SuggestionsResponse(BaseModel):
    """Reconciled suggestion list for one snapshot."""
    suggestions: list[Suggestion] = []
    degraded: bool = False


class ApplySuggestionBody(BaseModel):
    """Accept a suggestion against the text it was computed for."""
    text: str
    suggestion: Suggestion

    class Config:
        extra = "forbid"


class ApplySuggestionResponse(BaseModel):
    text: str


# ============================================================================
# Remote Grammar Checker (LanguageTool wire format)
# ============================================================================

class LanguageToolReplacement(BaseModel):
    value: str


class LanguageToolCategory(BaseModel):
    id: str


class LanguageToolRule(BaseModel):
    id: str
    category: LanguageToolCategory


class LanguageToolMatch(BaseModel):
    """One match from the external checker. Unknown fields are ignored."""
    message: str
    offset: int
    length: int
    replacements: list[LanguageToolReplacement] = []
    rule: LanguageToolRule


class LanguageToolResponse(BaseModel):
    matches: list[LanguageToolMatch]


# ============================================================================
# Readability Models
# ============================================================================

class ReadabilityScore(BaseModel):
    """A single readability formula result."""
    score_type: ScoreType
    score_value: float


class ReadabilityReport(BaseModel):
    """
    Exactly three readability scores plus a human-readable summary.

    Scores are always listed in the order: flesch_reading_ease,
    flesch_kincaid_grade, automated_readability.
    """
    document_id: str
    readability_scores: list[ReadabilityScore]
    summary: str
    word_count: int
    sentence_count: int
    analysis_text_length: int


# ============================================================================
# Tone Models
# ============================================================================

class ToneScores(BaseModel):
    """Fixed per-category totals. One field per tone, no open map."""
    formal: int = 0
    casual: int = 0
    confident: int = 0
    friendly: int = 0
    professional: int = 0


class ToneResult(BaseModel):
    """Dominant tone with confidence (0-100) and the category breakdown."""
    document_id: str
    tone_detected: ToneCategory
    confidence: int = Field(..., ge=0, le=100)
    scores: ToneScores
    summary: str


class ToneResponse(BaseModel):
    tone_analysis: ToneResult


# ============================================================================
# Document Session Models
# ============================================================================

class DocumentAnalysis(BaseModel):
    """
    Result delivered by a document coordinator for one generation.

    tone/readability are None when the snapshot is below their minimum
    length or has no countable sentences.
    """
    document_id: str
    generation: int
    suggestions: list[Suggestion] = []
    degraded: bool = False
    tone: Optional[ToneResult] = None
    readability: Optional[ReadabilityReport] = None


class EditAccepted(BaseModel):
    """Acknowledgement for a scheduled edit."""
    document_id: str
    generation: int
    state: CoordinatorStateName


class SessionInfo(BaseModel):
    document_id: str
    generation: int
    state: CoordinatorStateName


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Body of the generic 500 response; internals stay in the logs."""
    error: str
    detail: Optional[str] = None
