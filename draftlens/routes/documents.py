"""
Document Session Routes
Debounced, generation-checked analysis for documents being edited.

Flow:
1. Open a session for a document
2. Post every edit; each one bumps the generation and restarts the timer
3. Read the latest delivered analysis (superseded results never appear)
4. Close the session when the document is closed
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..models.schemas import DocumentAnalysis, EditAccepted, EditRequestBody, SessionInfo
from ..services import (
    CoordinatorRegistry,
    InputValidator,
    InputValidationError,
    SessionClosedError,
    SessionNotFoundError,
)


router = APIRouter(prefix="/api/documents", tags=["Documents"])


def get_registry(request: Request) -> CoordinatorRegistry:
    """The coordinator registry owned by this application instance."""
    return request.app.state.coordinators


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{document_id}/session", response_model=SessionInfo, status_code=201)
async def open_session(
    document_id: str,
    registry: CoordinatorRegistry = Depends(get_registry)
):
    """Open (or re-open) the analysis session for a document."""
    coordinator = registry.open(document_id)
    return SessionInfo(
        document_id=document_id,
        generation=coordinator.generation,
        state=coordinator.state.value
    )


@router.post("/{document_id}/edits", response_model=EditAccepted, status_code=202)
async def submit_edit(
    document_id: str,
    body: EditRequestBody,
    registry: CoordinatorRegistry = Depends(get_registry)
):
    """
    Schedule analysis of a new snapshot.

    Validation happens now; the analysis runs after the debounce delay.
    """
    try:
        coordinator = registry.get(document_id)
    except SessionNotFoundError as e:
        raise _not_found(e)

    try:
        InputValidator().validate(body.text, document_id, "suggestions")
    except InputValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    try:
        request = coordinator.submit_edit(body.text)
    except SessionClosedError as e:
        raise _not_found(e)

    return EditAccepted(
        document_id=document_id,
        generation=request.generation,
        state=coordinator.state.value
    )


@router.get("/{document_id}/analysis", response_model=DocumentAnalysis)
async def latest_analysis(
    document_id: str,
    registry: CoordinatorRegistry = Depends(get_registry)
):
    """The most recent analysis whose generation was current on completion."""
    try:
        coordinator = registry.get(document_id)
    except SessionNotFoundError as e:
        raise _not_found(e)

    if coordinator.latest_result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No analysis delivered yet for this document."
        )
    return coordinator.latest_result


@router.delete("/{document_id}/session", status_code=204)
async def close_session(
    document_id: str,
    registry: CoordinatorRegistry = Depends(get_registry)
):
    """Close the session and discard any outstanding analysis."""
    try:
        await registry.close(document_id)
    except SessionNotFoundError as e:
        raise _not_found(e)
    return Response(status_code=204)
