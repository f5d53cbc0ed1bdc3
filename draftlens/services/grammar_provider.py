"""
Remote Grammar Source

Adapter over an external grammar checker (LanguageTool's /check API).

The checker is a black box: we send {text, language} and map whatever
matches come back onto Suggestions. Anything that goes wrong on the way
(network, status, payload) becomes a GrammarSourceError, classified as
transient (worth retrying) or permanent (fall back immediately).

This module provides:
- GrammarSourceError hierarchy + failure classification
- Abstract GrammarProvider interface
- PlaceholderGrammarProvider for offline use and testing
- LanguageToolProvider for production
- matches_to_suggestions() mapping with issue-type classification
- Factory function to get configured provider
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging
import re

import httpx
from pydantic import ValidationError

from ..config import get_settings
from ..models.schemas import (
    IssueType,
    LanguageToolCategory,
    LanguageToolMatch,
    LanguageToolReplacement,
    LanguageToolResponse,
    LanguageToolRule,
    Suggestion,
)


logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class GrammarSourceError(Exception):
    """
    Raised when the remote grammar source cannot produce matches.

    Never shown to the caller: the reconciler absorbs it and degrades to
    local-only suggestions. internal_reason is for logs only.
    """
    def __init__(self, message: str, internal_reason: str = ""):
        self.message = message
        self.internal_reason = internal_reason
        super().__init__(message)


class TransientSourceError(GrammarSourceError):
    """Network-class failure. Retried with backoff, then degraded."""


class PermanentSourceError(GrammarSourceError):
    """Non-network failure (bad status, malformed payload). Never retried."""


# Matched case-insensitively as substrings of the failure reason
NETWORK_ERROR_PHRASES = (
    'failed to fetch',
    'network error',
    'err_name_not_resolved',
    'err_network',
    'err_internet_disconnected',
    'err_connection_timed_out',
    'timeout',
    'connection refused',
    'connection reset',
    'temporarily unavailable',
)


def is_network_failure(reason: str) -> bool:
    reason = (reason or "").lower()
    return any(phrase in reason for phrase in NETWORK_ERROR_PHRASES)


def classify_failure(reason: str) -> GrammarSourceError:
    """Build the right GrammarSourceError subclass for a failure reason."""
    if is_network_failure(reason):
        return TransientSourceError(
            "Grammar checker is temporarily unreachable.",
            internal_reason=reason
        )
    return PermanentSourceError(
        "Grammar checker returned an unusable response.",
        internal_reason=reason
    )


def is_transient(error: Exception) -> bool:
    """Retry predicate for call_with_retry."""
    return isinstance(error, TransientSourceError)


# =============================================================================
# ISSUE TYPE CLASSIFICATION
# =============================================================================

def classify_issue_type(rule_id: str, category_id: str) -> IssueType:
    """
    Map a checker rule/category pair to one of our four issue types.

    Precedence: spelling > style > clarity > grammar (default).
    """
    category = category_id.lower()
    rule = rule_id.lower()

    if "typo" in category or "spell" in rule:
        return "spelling"
    if "style" in category or "redundancy" in category:
        return "style"
    if "clarity" in category or "confused" in category:
        return "clarity"
    return "grammar"


def utf16_offset_map(text: str) -> Dict[int, int]:
    """
    Map every UTF-16 code-unit boundary in text to its Python string index.

    LanguageTool counts offsets in UTF-16 code units, so characters outside
    the BMP (emoji, some CJK) take two units but one Python index. Offsets
    that fall inside a surrogate pair have no entry.
    """
    mapping = {}
    units = 0
    for index, char in enumerate(text):
        mapping[units] = index
        units += 2 if ord(char) > 0xFFFF else 1
    mapping[units] = len(text)
    return mapping


def to_string_offsets(matches: List[LanguageToolMatch], text: str) -> List[LanguageToolMatch]:
    """Rewrite UTF-16 offset/length pairs as Python string offsets."""
    mapping = utf16_offset_map(text)
    converted = []
    for match in matches:
        start = mapping.get(match.offset)
        end = mapping.get(match.offset + match.length)
        if start is None or end is None or match.length < 0:
            logger.warning(
                "Dropping match %s with unmappable UTF-16 span [%d, +%d)",
                match.rule.id, match.offset, match.length
            )
            continue
        converted.append(match.model_copy(update={"offset": start, "length": end - start}))
    return converted


def matches_to_suggestions(
    matches: List[LanguageToolMatch],
    text: str,
    document_id: str
) -> List[Suggestion]:
    """
    Convert checker matches into remote Suggestions.

    Matches whose span does not fit inside text are dropped: offsets we
    hand to the editor must always index the text it showed us.
    """
    suggestions = []
    for index, match in enumerate(matches):
        start = match.offset
        end = match.offset + match.length
        if start < 0 or match.length < 0 or end > len(text):
            logger.warning(
                "Dropping out-of-range match %s [%d, %d) for text of length %d",
                match.rule.id, start, end, len(text)
            )
            continue

        original = text[start:end]
        suggested = match.replacements[0].value if match.replacements else original

        suggestions.append(Suggestion(
            id=f"lt-{index}-{start}",
            document_id=document_id,
            start=start,
            end=end,
            issue_type=classify_issue_type(match.rule.id, match.rule.category.id),
            original_text=original,
            suggested_text=suggested,
            explanation=match.message,
            source="remote",
        ))
    return suggestions


# =============================================================================
# ABSTRACT GRAMMAR PROVIDER
# =============================================================================

class GrammarProvider(ABC):
    """Abstract base class for remote grammar checkers."""

    name = "grammar"

    @abstractmethod
    async def check(self, text: str) -> List[LanguageToolMatch]:
        """
        Check text and return the checker's matches.

        Args:
            text: The exact snapshot to check; offsets refer to it

        Returns:
            List of LanguageToolMatch (possibly empty), offset and length
            given as Python string indices into text

        Raises:
            TransientSourceError: On network-class failures
            PermanentSourceError: On any other failure
        """
        pass


# =============================================================================
# PLACEHOLDER PROVIDER (OFFLINE)
# =============================================================================

class PlaceholderGrammarProvider(GrammarProvider):
    """
    Deterministic rule-based checker that speaks the LanguageTool format.

    Used when no external checker is configured and in tests.
    """

    name = "placeholder"

    RULES = [
        (
            re.compile(r'\bi\s+am\s+going\s+to\s+went\b', re.IGNORECASE),
            "I am going to go",
            "Incorrect verb tense",
            "GOING_TO_PAST_TENSE",
            "GRAMMAR",
        ),
        (
            re.compile(r'\byour\s+welcome\b', re.IGNORECASE),
            "you're welcome",
            "Use 'you're' (contraction) not 'your' (possessive)",
            "YOUR_YOU_RE",
            "CONFUSED_WORDS",
        ),
        (
            re.compile(r'\bits\s+raining\b', re.IGNORECASE),
            "it's raining",
            "Use 'it's' (it is) not 'its' (possessive)",
            "ITS_IT_IS",
            "CONFUSED_WORDS",
        ),
    ]

    async def check(self, text: str) -> List[LanguageToolMatch]:
        matches = []
        for pattern, replacement, message, rule_id, category_id in self.RULES:
            for found in pattern.finditer(text):
                matches.append(LanguageToolMatch(
                    message=message,
                    offset=found.start(),
                    length=found.end() - found.start(),
                    replacements=[LanguageToolReplacement(value=replacement)],
                    rule=LanguageToolRule(
                        id=rule_id,
                        category=LanguageToolCategory(id=category_id)
                    ),
                ))
        matches.sort(key=lambda m: m.offset)
        return matches


# =============================================================================
# LANGUAGETOOL PROVIDER (PRODUCTION)
# =============================================================================

class LanguageToolProvider(GrammarProvider):
    """
    LanguageTool HTTP API client.

    API ACCESS:
    - POST {base_url}/check, form-encoded text + language
    - No additional timeout beyond the client's own; retries are the
      caller's responsibility (see call_with_retry)
    """

    name = "languagetool"

    def __init__(
        self,
        base_url: str = "https://api.languagetool.org/v2",
        language: str = "en-US",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: LanguageTool API root (public or self-hosted)
            language: Language code sent with every request
            timeout: HTTP client timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout = timeout
        self._transport = transport

    async def check(self, text: str) -> List[LanguageToolMatch]:
        """Send text to LanguageTool and parse its matches, converting UTF-16 offsets."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/check",
                    data={"text": text, "language": self.language},
                )
        except httpx.TimeoutException as e:
            raise classify_failure(f"LanguageTool request timeout: {type(e).__name__}: {e}")
        except httpx.TransportError as e:
            raise classify_failure(f"LanguageTool network error: {type(e).__name__}: {e}")
        except Exception as e:
            raise classify_failure(f"LanguageTool request failed: {type(e).__name__}: {e}")

        if not response.is_success:
            raise PermanentSourceError(
                "Grammar checker returned an unusable response.",
                internal_reason=f"LanguageTool API error: {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PermanentSourceError(
                "Grammar checker returned an unusable response.",
                internal_reason=f"JSON parse error: {e}"
            )

        try:
            matches = LanguageToolResponse.model_validate(payload).matches
        except ValidationError as e:
            raise PermanentSourceError(
                "Grammar checker returned an unusable response.",
                internal_reason=f"Malformed LanguageTool payload: {e.error_count()} errors"
            )

        return to_string_offsets(matches, text)


# =============================================================================
# FACTORY FUNCTION
# =============================================================================

def get_grammar_provider() -> GrammarProvider:
    """
    Get the configured grammar provider based on settings.

    Uses GRAMMAR_PROVIDER environment variable:
    - "placeholder": PlaceholderGrammarProvider (default, offline)
    - "languagetool": LanguageToolProvider
    """
    settings = get_settings()

    if settings.grammar_provider == "languagetool":
        return LanguageToolProvider(
            base_url=settings.languagetool_url,
            language=settings.languagetool_language,
            timeout=settings.languagetool_timeout
        )

    return PlaceholderGrammarProvider()
