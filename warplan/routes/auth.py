# warplan/routes/auth.py
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from warplan.config import SESSION_HOURS
from warplan.database import get_db
from warplan.models.session import SessionToken
from warplan.models.user import User
from warplan.models.village import Village

log = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()
router = APIRouter(prefix="/auth", tags=["auth"])

# Pi-friendly hashing (no native deps)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=32)
    password: str = Field(min_length=8, max_length=128)
    display_name: Optional[str] = Field(default=None, max_length=64)


class RegisterResponse(BaseModel):
    user_id: int
    username: str
    display_name: str


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class MeResponse(BaseModel):
    user_id: int
    username: str
    display_name: str
    villages: list[dict]


def _now_utc_naive() -> datetime:
    # Naive UTC datetime (no tzinfo). Works cleanly with SQLite.
    return datetime.utcnow()


def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = creds.credentials

    sess = db.query(SessionToken).filter(SessionToken.token == token).first()
    if not sess or sess.revoked_at is not None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if not sess.is_active(_now_utc_naive()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")

    user = db.query(User).filter(User.id == sess.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session user")

    return user


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> RegisterResponse:
    existing = db.query(User).filter(User.username == payload.username).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")

    user = User(
        username=payload.username,
        password_hash=pwd_context.hash(payload.password),
        display_name=(payload.display_name or "").strip() or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    log.info("Registered user %s (%s)", user.id, user.username)
    return RegisterResponse(
        user_id=user.id,
        username=user.username,
        display_name=user.display_name or user.username,
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    user = db.query(User).filter(User.username == payload.username).first()
    if not user or not pwd_context.verify(payload.password, user.password_hash):
        log.info("Failed login for %r", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    token = secrets.token_hex(32)
    expires_at = _now_utc_naive() + timedelta(hours=SESSION_HOURS)

    sess = SessionToken(
        user_id=user.id,
        token=token,
        created_at=_now_utc_naive(),
        expires_at=expires_at,
    )
    db.add(sess)
    db.commit()

    return LoginResponse(token=token, expires_at=expires_at)


@router.post("/logout")
def logout(
    creds: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    sess = db.query(SessionToken).filter(SessionToken.token == creds.credentials).first()
    sess.revoked_at = _now_utc_naive()
    db.commit()

    log.info("User %s logged out", current_user.id)
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MeResponse:
    villages = db.query(Village).filter(Village.owner_id == current_user.id).order_by(Village.id.asc()).all()
    return MeResponse(
        user_id=current_user.id,
        username=current_user.username,
        display_name=current_user.display_name or current_user.username,
        villages=[
            {
                "village_id": v.id,
                "name": v.name,
                "x": v.x,
                "y": v.y,
                "ts_level": v.ts_level,
            }
            for v in villages
        ],
    )
