"""
Analysis Routes
Synchronous, one-shot analysis of a text snapshot.

Each endpoint runs:
- Input validation (GATE)
- The analysis itself
and returns structured results. Nothing is persisted here.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..models.schemas import (
    AnalysisRequestBody,
    ApplySuggestionBody,
    ApplySuggestionResponse,
    ReadabilityReport,
    SuggestionsResponse,
    ToneResponse,
)
from ..services import (
    InputValidator,
    InputValidationError,
    InvalidInputError,
    ReadabilityCalculator,
    SuggestionEngine,
    ToneAnalyzer,
    apply_suggestion,
    get_suggestion_engine,
)


router = APIRouter(prefix="/api", tags=["Analysis"])


def _validate(body: AnalysisRequestBody, kind: str) -> None:
    try:
        InputValidator().validate(body.text, body.document_id, kind)
    except InputValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )


@router.post("/analyze/tone", response_model=ToneResponse)
async def analyze_tone(body: AnalysisRequestBody):
    """
    Classify the tone of the text.

    Requires at least 20 characters.
    """
    _validate(body, "tone")

    result = ToneAnalyzer().analyze(body.text, body.document_id)
    return ToneResponse(tone_analysis=result)


@router.post("/analyze/readability", response_model=ReadabilityReport)
async def analyze_readability(body: AnalysisRequestBody):
    """
    Compute Flesch Reading Ease, Flesch-Kincaid Grade and ARI.

    Requires at least 50 characters with at least one word and sentence.
    """
    _validate(body, "readability")

    try:
        return ReadabilityCalculator().calculate(body.text, body.document_id)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )


@router.post("/analyze/grammar", response_model=SuggestionsResponse)
async def analyze_grammar(
    body: AnalysisRequestBody,
    engine: SuggestionEngine = Depends(get_suggestion_engine)
):
    """
    Grammar and spelling suggestions, sorted by start offset.

    Remote checker failures are absorbed: the response is then built from
    the local dictionary alone and `degraded` is true.
    """
    _validate(body, "suggestions")

    result = await engine.suggest(body.text, body.document_id)
    return SuggestionsResponse(
        suggestions=result.suggestions,
        degraded=result.degraded
    )


@router.post("/suggestions/apply", response_model=ApplySuggestionResponse)
async def accept_suggestion(body: ApplySuggestionBody):
    """Return the text with the suggestion's span replaced."""
    try:
        return ApplySuggestionResponse(text=apply_suggestion(body.text, body.suggestion))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
