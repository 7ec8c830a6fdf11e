from fastapi import HTTPException

from cartwise.services.session_service import ShoppingSession, session_registry


async def get_session(session_id: str) -> ShoppingSession:
    """Resolve the path's session id, 404 if it has ended or never existed."""
    session = session_registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session
