"""FastAPI dependencies."""

from fastapi import HTTPException, Request

from .core.engine import MatchingEngine


def get_engine(request: Request) -> MatchingEngine:
    """Return the engine owned by the running application."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Matching engine is not initialized")
    return engine
