"""
Suggestion Reconciler

Merges remote and local suggestions into one ordered, deduplicated list.

MERGE RULES:
1. Remote suggestions first, then local
2. Exact (start, end) duplicates: the first one wins, so remote beats local
3. Survivors sorted ascending by start (stable, so ties keep merge order)

A missing remote list (source failed) is not an error: the result is
local-only and flagged degraded.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.schemas import Suggestion


@dataclass
class SuggestionResult:
    """Reconciled suggestions for one snapshot."""
    suggestions: List[Suggestion] = field(default_factory=list)
    degraded: bool = False
    remote_error: Optional[str] = None  # internal reason, for logs only


def reconcile(
    remote: Optional[List[Suggestion]],
    local: List[Suggestion],
    remote_error: Optional[str] = None
) -> SuggestionResult:
    """
    Merge the two sources.

    Args:
        remote: Remote suggestions, or None when the remote source failed
        local: Local dictionary suggestions
        remote_error: Why the remote source failed, if it did
    """
    merged = list(remote or []) + list(local)

    seen = set()
    unique = []
    for suggestion in merged:
        span = (suggestion.start, suggestion.end)
        if span in seen:
            continue
        seen.add(span)
        unique.append(suggestion)

    unique.sort(key=lambda s: s.start)

    return SuggestionResult(
        suggestions=unique,
        degraded=remote is None,
        remote_error=remote_error,
    )


def apply_suggestion(text: str, suggestion: Suggestion) -> str:
    """
    Accept a suggestion: splice suggested_text over its span.

    Raises ValueError if the span does not fit the text.
    """
    if not 0 <= suggestion.start <= suggestion.end <= len(text):
        raise ValueError(
            f"Suggestion span [{suggestion.start}, {suggestion.end}) "
            f"is outside text of length {len(text)}"
        )
    return text[:suggestion.start] + suggestion.suggested_text + text[suggestion.end:]
