"""
Resilience Coordinator

Owns debounce timing and stale-result suppression for ONE document.

STATE MACHINE:
- IDLE    → edit                  → PENDING (debounce timer started)
- PENDING → edit                  → PENDING (timer restarted, generation + 1)
- PENDING → timer elapses         → RUNNING (current generation captured, analysis dispatched)
- RUNNING → edit                  → PENDING (in-flight analysis keeps running)
- RUNNING → analysis completes    → IDLE if its generation is still current,
                                    otherwise discarded as stale, state untouched

CANCELLATION MODEL:
Edits never abort an in-flight analysis (or its remote call). They only
bump the generation, so the old result fails the generation check when
it arrives. The check and the delivery run on the event loop with no
await in between, so no edit can slip in between comparison and delivery.

Each open document gets its own coordinator, held by a
CoordinatorRegistry that the application owns. Nothing is shared between
documents.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Set

from ..models.schemas import DocumentAnalysis
from .document_analyzer import AnalysisRequest


logger = logging.getLogger(__name__)


AnalyzeFn = Callable[[AnalysisRequest], Awaitable[DocumentAnalysis]]
DeliverFn = Callable[[DocumentAnalysis], None]


# =============================================================================
# EXCEPTIONS
# =============================================================================

class StaleResult(Exception):
    """
    A completed analysis whose generation is no longer current.

    Raised and absorbed inside the coordinator; never reported to callers.
    """
    def __init__(self, document_id: str, generation: int, current_generation: int):
        self.document_id = document_id
        self.generation = generation
        self.current_generation = current_generation
        super().__init__(
            f"Stale result for {document_id}: generation {generation} "
            f"(current {current_generation})"
        )


class SessionClosedError(Exception):
    """Raised when editing a document whose session has ended."""
    def __init__(self, document_id: str):
        self.document_id = document_id
        self.message = f"Document session '{document_id}' is closed."
        super().__init__(self.message)


class SessionNotFoundError(Exception):
    """Raised when no session is open for a document."""
    def __init__(self, document_id: str):
        self.document_id = document_id
        self.message = f"No open session for document '{document_id}'."
        super().__init__(self.message)


class CoordinatorState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"
    CLOSED = "closed"


# =============================================================================
# PER-DOCUMENT COORDINATOR
# =============================================================================

class DocumentCoordinator:
    """Debounce + generation bookkeeping for one document session."""

    def __init__(
        self,
        document_id: str,
        analyze: AnalyzeFn,
        debounce_seconds: float = 1.5,
        on_deliver: Optional[DeliverFn] = None
    ):
        self.document_id = document_id
        self.debounce_seconds = debounce_seconds
        self._analyze = analyze
        self._on_deliver = on_deliver

        self._generation = 0
        self._state = CoordinatorState.IDLE
        self._latest_request: Optional[AnalysisRequest] = None
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

        self.latest_result: Optional[DocumentAnalysis] = None
        self.stale_discards = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> CoordinatorState:
        return self._state

    def submit_edit(self, text: str) -> AnalysisRequest:
        """
        Record a new edit and (re)start the debounce timer.

        Must be called from within the running event loop.
        """
        if self._state is CoordinatorState.CLOSED:
            raise SessionClosedError(self.document_id)

        self._generation += 1
        request = AnalysisRequest(
            text=text,
            document_id=self.document_id,
            generation=self._generation,
        )
        self._latest_request = request

        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._debounce())
        self._state = CoordinatorState.PENDING

        return request

    async def _debounce(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._dispatch()

    def _dispatch(self) -> None:
        request = self._latest_request
        if request is None or request.generation != self._generation:
            return

        self._state = CoordinatorState.RUNNING
        task = asyncio.get_running_loop().create_task(self._run(request))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, request: AnalysisRequest) -> None:
        try:
            result = await self._analyze(request)
        except Exception:
            logger.exception(
                "Analysis failed for %s generation %d",
                request.document_id, request.generation
            )
            if (request.generation == self._generation
                    and self._state is CoordinatorState.RUNNING):
                self._state = CoordinatorState.IDLE
            return

        try:
            self._complete(request, result)
        except StaleResult as e:
            self.stale_discards += 1
            logger.debug("Discarding result: %s", e)

    def _complete(self, request: AnalysisRequest, result: DocumentAnalysis) -> None:
        # Compare and deliver without yielding to the loop.
        if self._state is CoordinatorState.CLOSED or request.generation != self._generation:
            raise StaleResult(request.document_id, request.generation, self._generation)

        self._state = CoordinatorState.IDLE
        self.latest_result = result
        if self._on_deliver is not None:
            self._on_deliver(result)

    async def drain(self) -> None:
        """Wait until no timer or analysis is outstanding."""
        while True:
            pending: List[asyncio.Task] = list(self._in_flight)
            if self._timer is not None and not self._timer.done():
                pending.append(self._timer)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """End the session: cancel the timer and any in-flight analysis."""
        self._state = CoordinatorState.CLOSED
        tasks = list(self._in_flight)
        if self._timer is not None and not self._timer.done():
            tasks.append(self._timer)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


# =============================================================================
# REGISTRY (ONE COORDINATOR PER OPEN DOCUMENT)
# =============================================================================

class CoordinatorRegistry:
    """
    Keyed collection of document coordinators.

    Lifecycle follows the document session: open() creates, close()
    destroys. Owned by the application instance, never module-global.
    """

    def __init__(
        self,
        analyze: AnalyzeFn,
        debounce_seconds: float = 1.5,
        on_deliver: Optional[DeliverFn] = None
    ):
        self._analyze = analyze
        self.debounce_seconds = debounce_seconds
        self._on_deliver = on_deliver
        self._coordinators: Dict[str, DocumentCoordinator] = {}

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._coordinators

    def __len__(self) -> int:
        return len(self._coordinators)

    def open(self, document_id: str) -> DocumentCoordinator:
        """Open a session, or return the one already open."""
        coordinator = self._coordinators.get(document_id)
        if coordinator is None:
            coordinator = DocumentCoordinator(
                document_id,
                self._analyze,
                debounce_seconds=self.debounce_seconds,
                on_deliver=self._on_deliver,
            )
            self._coordinators[document_id] = coordinator
            logger.info("Opened session for document %s", document_id)
        return coordinator

    def get(self, document_id: str) -> DocumentCoordinator:
        coordinator = self._coordinators.get(document_id)
        if coordinator is None:
            raise SessionNotFoundError(document_id)
        return coordinator

    async def close(self, document_id: str) -> None:
        coordinator = self._coordinators.pop(document_id, None)
        if coordinator is None:
            raise SessionNotFoundError(document_id)
        await coordinator.close()
        logger.info("Closed session for document %s", document_id)

    async def close_all(self) -> None:
        for document_id in list(self._coordinators):
            await self.close(document_id)
