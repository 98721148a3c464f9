# warplan/models/village.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warplan.database import Base


class Village(Base):
    __tablename__ = "villages"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Ownership
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    owner: Mapped["User"] = relationship(back_populates="villages")

    name: Mapped[str] = mapped_column(String(40), nullable=False)

    # Map position (tile coords, -200..200)
    x: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    y: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    # Tournament Square level (0-20)
    ts_level: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    # Training buildings (0 = not built)
    barracks_level: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    stable_level: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    workshop_level: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
