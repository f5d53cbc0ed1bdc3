"""
Input Validation Service

This is the GATE before any analysis runs. It guarantees:
- A document identifier is present
- No empty input
- No inputs above the maximum length (50,000 chars)
- Tone analysis gets at least 20 characters
- Readability analysis gets at least 50 characters

If ANY condition fails → block with clear, human-readable error.
Failures here are returned synchronously and never retried.
"""

from typing import Literal, Optional

from ..config import get_settings


AnalysisKind = Literal["tone", "readability", "suggestions"]


# =============================================================================
# EXCEPTION CLASS
# =============================================================================

class InputValidationError(Exception):
    """
    Raised when input fails validation.

    Contains a human-readable message suitable for returning to the user.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# INPUT VALIDATOR SERVICE
# =============================================================================

class InputValidator:
    """
    Validates a text snapshot BEFORE any analysis occurs.

    Length limits come from settings so deployments can tune them;
    lengths are measured on the raw text, the same string offsets refer to.
    """

    def __init__(
        self,
        max_length: Optional[int] = None,
        min_tone_length: Optional[int] = None,
        min_readability_length: Optional[int] = None
    ):
        settings = get_settings()
        self.max_length = max_length or settings.max_text_length
        self.min_lengths = {
            "tone": min_tone_length or settings.min_tone_length,
            "readability": min_readability_length or settings.min_readability_length,
            "suggestions": 1,
        }

    def validate(self, text: str, document_id: str, kind: AnalysisKind) -> None:
        """
        Validate a snapshot for one kind of analysis.

        Raises InputValidationError if any validation fails.

        Execution order:
        1. Document identifier
        2. Presence check (not empty)
        3. Maximum length
        4. Minimum length for the analysis kind
        """
        self._validate_document_id(document_id)
        self.validate_text(text)
        self._validate_min_length(text, kind)

    def validate_text(self, text: str) -> None:
        """Checks shared by every analysis kind."""
        self._validate_presence(text)
        self._validate_max_length(text)

    def meets_minimum(self, text: str, kind: AnalysisKind) -> bool:
        return len(text) >= self.min_lengths[kind]

    def _validate_document_id(self, document_id: str) -> None:
        if not document_id or not document_id.strip():
            raise InputValidationError("A document identifier is required.")

    def _validate_presence(self, text: str) -> None:
        if not text:
            raise InputValidationError("No text provided. Please write something to analyze.")

    def _validate_max_length(self, text: str) -> None:
        """
        HARD LIMIT: no chunking, no truncation.
        """
        if len(text) > self.max_length:
            raise InputValidationError(
                f"Text too long ({len(text)} characters). "
                f"Maximum is {self.max_length:,} characters."
            )

    def _validate_min_length(self, text: str, kind: AnalysisKind) -> None:
        minimum = self.min_lengths[kind]
        if len(text) < minimum:
            raise InputValidationError(
                f"Text too short for {kind} analysis ({len(text)} characters). "
                f"Minimum is {minimum} characters."
            )
