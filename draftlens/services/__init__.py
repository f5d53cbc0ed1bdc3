# Services package
from .text_metrics import TextMetrics, compute_metrics
from .readability import ReadabilityCalculator, InvalidInputError
from .tone_analyzer import ToneAnalyzer
from .input_validator import InputValidator, InputValidationError
from .local_dictionary import LocalDictionarySource
from .grammar_provider import (
    GrammarProvider,
    PlaceholderGrammarProvider,
    LanguageToolProvider,
    GrammarSourceError,
    TransientSourceError,
    PermanentSourceError,
    get_grammar_provider
)
from .retry import BackoffPolicy, call_with_retry
from .reconciler import SuggestionResult, reconcile, apply_suggestion
from .suggestion_engine import SuggestionEngine, get_suggestion_engine
from .document_analyzer import AnalysisRequest, DocumentAnalyzer
from .coordinator import (
    CoordinatorRegistry,
    CoordinatorState,
    DocumentCoordinator,
    SessionClosedError,
    SessionNotFoundError,
    StaleResult
)
