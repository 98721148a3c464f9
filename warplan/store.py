# warplan/store.py
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from warplan.config import TS_MAX_LEVEL
from warplan.models.user import User
from warplan.models.village import Village

log = logging.getLogger(__name__)


class StoreError(Exception):
    """A write to the village store failed and was rolled back."""


class VillageNotFound(LookupError):
    pass


class VillageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=40)
    x: int = 0
    y: int = 0
    ts_level: int = Field(default=0, ge=0, le=TS_MAX_LEVEL)
    barracks_level: int = Field(default=0, ge=0, le=20)
    stable_level: int = Field(default=0, ge=0, le=20)
    workshop_level: int = Field(default=0, ge=0, le=20)


class VillageStore(Protocol):
    def current_user(self) -> User: ...

    def list_villages(self) -> list[VillageRecord]: ...

    def upsert_village(self, record: VillageRecord) -> VillageRecord: ...

    def delete_village(self, village_id: int) -> bool: ...


_EDITABLE = ("name", "x", "y", "ts_level", "barracks_level", "stable_level", "workshop_level")


class SqlVillageStore:
    """Village CRUD scoped to a single owner."""

    def __init__(self, db: Session, user: User) -> None:
        self.db = db
        self.user = user

    def current_user(self) -> User:
        return self.user

    def _get(self, village_id: int) -> Optional[Village]:
        return (
            self.db.query(Village)
            .filter(Village.id == int(village_id), Village.owner_id == self.user.id)
            .first()
        )

    def list_villages(self) -> list[VillageRecord]:
        # Read failures mean "no villages" so planners still render.
        try:
            rows = (
                self.db.query(Village)
                .filter(Village.owner_id == self.user.id)
                .order_by(Village.id.asc())
                .all()
            )
        except SQLAlchemyError:
            log.warning("Village list failed for user %s", self.user.id, exc_info=True)
            self.db.rollback()
            return []
        return [VillageRecord.model_validate(v) for v in rows]

    def upsert_village(self, record: VillageRecord) -> VillageRecord:
        try:
            if record.id is None:
                row = Village(owner_id=self.user.id)
                self.db.add(row)
            else:
                row = self._get(record.id)
                if row is None:
                    raise VillageNotFound(record.id)

            for k in _EDITABLE:
                setattr(row, k, getattr(record, k))

            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("village upsert failed") from e

        log.info("User %s saved village %s (%s|%s)", self.user.id, row.id, row.x, row.y)
        return VillageRecord.model_validate(row)

    def delete_village(self, village_id: int) -> bool:
        try:
            row = self._get(village_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("village delete failed") from e

        log.info("User %s deleted village %s", self.user.id, village_id)
        return True

    def import_villages(self, records: Iterable[VillageRecord]) -> list[VillageRecord]:
        """Imported rows always get fresh ids; incoming ids are ignored."""
        return [
            self.upsert_village(r.model_copy(update={"id": None}))
            for r in records
        ]


def alliance_members(db: Session) -> list[dict]:
    try:
        counts = dict(
            db.query(Village.owner_id, func.count(Village.id))
            .group_by(Village.owner_id)
            .all()
        )
        users = db.query(User).order_by(User.username.asc()).all()
    except SQLAlchemyError:
        log.warning("Alliance load failed", exc_info=True)
        db.rollback()
        return []

    members = [
        {
            "user_id": int(u.id),
            "display_name": u.display_name or u.username,
            "updated_at": u.updated_at.isoformat() if u.updated_at else None,
            "village_count": int(counts.get(u.id, 0)),
        }
        for u in users
    ]
    members.sort(key=lambda m: m["display_name"].lower())
    return members
