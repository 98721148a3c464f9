# warplan/routes/alliance.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from warplan.database import get_db
from warplan.models.user import User
from warplan.routes.auth import get_current_user
from warplan.store import alliance_members

router = APIRouter(prefix="/alliance", tags=["alliance"])


@router.get("")
def list_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    members = alliance_members(db)
    return {"members": members, "count": len(members)}
