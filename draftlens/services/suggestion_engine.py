"""
Suggestion Engine

Runs both suggestion sources for a snapshot and reconciles them.

PIPELINE:
1. Remote grammar source, wrapped in the retry policy
   - transient failures retried with backoff
   - permanent failures / exhausted retries → remote treated as absent
2. Local dictionary source (always runs, never fails)
3. Reconcile (remote wins exact-span collisions, sorted by start)

Source failures never reach the caller; they only set `degraded`.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from ..config import get_settings
from ..models.schemas import Suggestion
from .grammar_provider import (
    GrammarProvider,
    GrammarSourceError,
    get_grammar_provider,
    is_transient,
    matches_to_suggestions,
)
from .local_dictionary import LocalDictionarySource
from .reconciler import SuggestionResult, reconcile
from .retry import BackoffPolicy, RetryPolicy, call_with_retry


logger = logging.getLogger(__name__)


class SuggestionEngine:
    """Remote + local suggestions with retry and local-only fallback."""

    def __init__(
        self,
        provider: GrammarProvider,
        local_source: Optional[LocalDictionarySource] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.provider = provider
        self.local_source = local_source or LocalDictionarySource()
        self.retry_policy = retry_policy or BackoffPolicy()
        self._sleep = sleep

    async def suggest(self, text: str, document_id: str) -> SuggestionResult:
        remote, remote_error = await self._fetch_remote(text, document_id)
        local = self.local_source.check(text, document_id)

        result = reconcile(remote, local, remote_error=remote_error)
        if result.degraded:
            logger.warning(
                "Document %s: remote grammar source unavailable, using %d local suggestions (%s)",
                document_id, len(local), remote_error
            )
        return result

    async def _fetch_remote(
        self,
        text: str,
        document_id: str
    ) -> Tuple[Optional[List[Suggestion]], Optional[str]]:
        try:
            matches = await call_with_retry(
                lambda: self.provider.check(text),
                self.retry_policy,
                is_transient,
                sleep=self._sleep,
                label=f"{self.provider.name} check for {document_id}",
            )
        except GrammarSourceError as e:
            return None, e.internal_reason or e.message

        return matches_to_suggestions(matches, text, document_id), None


def get_suggestion_engine() -> SuggestionEngine:
    """Build an engine from settings."""
    settings = get_settings()
    return SuggestionEngine(
        provider=get_grammar_provider(),
        retry_policy=BackoffPolicy(
            max_retries=settings.retry_max_retries,
            base_delay=settings.retry_base_delay
        ),
    )
