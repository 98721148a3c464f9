# warplan/routes/villages.py
from __future__ import annotations

import secrets
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from warplan.config import ADMIN_KEY
from warplan.database import get_db
from warplan.models.user import User
from warplan.routes.auth import get_current_user
from warplan.store import SqlVillageStore, StoreError, VillageNotFound, VillageRecord

router = APIRouter(prefix="/villages", tags=["villages"])


def _is_admin(x_admin_key: str | None) -> bool:
    return bool(ADMIN_KEY) and bool(x_admin_key) and secrets.compare_digest(x_admin_key, ADMIN_KEY)


def _store_for(
    db: Session,
    current_user: User,
    owner_id: Optional[int],
    x_admin_key: str | None,
) -> SqlVillageStore:
    # Admins may read another player's villages.
    if owner_id is None or owner_id == current_user.id:
        return SqlVillageStore(db, current_user)
    if not _is_admin(x_admin_key):
        raise HTTPException(status_code=403, detail="Forbidden")
    owner = db.query(User).filter(User.id == int(owner_id)).first()
    if not owner:
        raise HTTPException(status_code=404, detail="User not found")
    return SqlVillageStore(db, owner)


@router.get("")
def list_villages(
    owner_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> dict:
    store = _store_for(db, current_user, owner_id, x_admin_key)
    villages = store.list_villages()
    return {
        "user_id": int(store.current_user().id),
        "villages": [v.model_dump() for v in villages],
        "count": len(villages),
    }


@router.put("")
def upsert_village(
    payload: VillageRecord,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    store = SqlVillageStore(db, current_user)
    try:
        saved = store.upsert_village(payload)
    except VillageNotFound:
        raise HTTPException(status_code=404, detail="Village not found")
    except StoreError:
        raise HTTPException(status_code=503, detail="Village store unavailable")
    return {"ok": True, "village": saved.model_dump()}


@router.delete("/{village_id}")
def delete_village(
    village_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    store = SqlVillageStore(db, current_user)
    try:
        deleted = store.delete_village(village_id)
    except StoreError:
        raise HTTPException(status_code=503, detail="Village store unavailable")
    if not deleted:
        raise HTTPException(status_code=404, detail="Village not found")
    return {"ok": True, "village_id": int(village_id)}


@router.get("/export")
def export_villages(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    villages = SqlVillageStore(db, current_user).list_villages()
    return {
        "filename": f"villages_export_{datetime.utcnow().date().isoformat()}.json",
        "villages": [v.model_dump() for v in villages],
    }


@router.post("/import")
def import_villages(
    payload: list[VillageRecord] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    if not payload:
        raise HTTPException(status_code=400, detail="villages list required")

    store = SqlVillageStore(db, current_user)
    try:
        imported = store.import_villages(payload)
    except StoreError:
        raise HTTPException(status_code=503, detail="Village store unavailable")
    return {
        "ok": True,
        "imported": [v.model_dump() for v in imported],
        "count": len(imported),
    }
