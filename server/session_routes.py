"""API routes for saved exploration sessions."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from server.dependencies import get_session_manager
from stellarmind.models.session import SessionData, SessionStats
from stellarmind.store import SessionImportError, SessionManager, SessionNotFoundError

router = APIRouter()


def _split(value: str | None) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()] if value else []


@router.get("/sessions")
def list_sessions(
    query: str = "",
    tags: str | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> list[SessionData]:
    """List sessions matching ``query`` and any of ``tags``, newest first."""
    return manager.filtered_sessions(query, _split(tags))


@router.get("/sessions/stats")
def session_stats(manager: SessionManager = Depends(get_session_manager)) -> SessionStats:
    return manager.stats()


@router.get("/sessions/export")
def export_sessions(
    ids: str | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    """Export sessions (all, or the comma-separated ``ids``) as tagged JSON."""
    content = manager.export_sessions(_split(ids) if ids else None)
    return Response(content=content, media_type="application/json")


@router.post("/sessions/import")
async def import_sessions(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> dict:
    try:
        imported = manager.import_sessions(await request.body())
    except SessionImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"imported": imported}


@router.get("/sessions/{session_id}")
def get_session(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> SessionData:
    try:
        return manager.require_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/sessions/{session_id}")
def save_session(
    session_id: str,
    session: SessionData,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionData:
    """Create or replace a session; the last write wins."""
    if session.id != session_id:
        raise HTTPException(status_code=400, detail="Session id does not match the URL")
    return manager.save_session(session)


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> dict:
    if manager.get_session(session_id) is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    manager.delete_session(session_id)
    return {"deleted": session_id}


@router.post("/sessions/{session_id}/duplicate")
def duplicate_session(
    session_id: str, manager: SessionManager = Depends(get_session_manager)
) -> SessionData:
    try:
        return manager.duplicate_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
