"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict:
    """Return application, database and catalog health status."""
    service = getattr(request.app.state, "inventory_service", None)
    catalog = {
        "items": service.catalog.count() if service else 0,
        "recipes": service.recipes.count() if service else 0,
    }
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "catalog": catalog}
    except Exception:
        return {"status": "error", "database": "disconnected", "catalog": catalog}
