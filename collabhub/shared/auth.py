# collabhub/shared/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError  # python-jose[cryptography]
from pydantic import BaseModel
from sqlalchemy.orm import Session

from collabhub.auth.models import User
from collabhub.shared.config import settings
from collabhub.shared.db import get_db
from collabhub.shared.errors import Unauthorized

bearer = HTTPBearer(auto_error=False, scheme_name="bearerAuth")

DEMO_USER_ID = "demo-user"


class Principal(BaseModel):
    """The authenticated caller, handed explicitly to every service operation."""
    id: str
    email: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def of(cls, user: User) -> "Principal":
        return cls(id=user.id, email=user.email, role=user.role)


def create_access_token(
    sub: str,
    role: str = "user",
    extra: Optional[Dict[str, Any]] = None,
    minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.JWT_EXPIRE_MIN)
    payload: Dict[str, Any] = {
        "sub": sub,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if settings.JWT_ISS:
        payload["iss"] = settings.JWT_ISS
    if settings.JWT_AUD:
        payload["aud"] = settings.JWT_AUD
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_KEY, algorithm=settings.JWT_ALG)

def _demo_user(db: Session) -> User:
    user = db.get(User, DEMO_USER_ID)
    if not user:
        # "!" is never a valid bcrypt hash, so nobody can log in as demo with a password
        user = User(id=DEMO_USER_ID, email=settings.DEMO_EMAIL, password_hash="!")
        db.add(user)
        db.commit()
        db.refresh(user)
    return user

def get_principal(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    # Always require a bearer token
    if not creds:
        raise Unauthorized("missing bearer token")

    token = creds.credentials

    # Demo shortcut (strict: must match DEMO_TOKEN exactly)
    if settings.AUTH_DEMO and token == settings.DEMO_TOKEN:
        return Principal.of(_demo_user(db))

    try:
        payload = jwt.decode(
            token,
            settings.JWT_KEY,
            algorithms=[settings.JWT_ALG],
            audience=settings.JWT_AUD,
            issuer=settings.JWT_ISS,
            options={
                "verify_aud": bool(settings.JWT_AUD),
                "verify_iss": bool(settings.JWT_ISS),
            },
        )
    except JWTError as e:
        raise Unauthorized(f"invalid token: {e}")

    sub = payload.get("sub")
    if not sub:
        raise Unauthorized("invalid token: missing sub")

    user = db.get(User, sub)
    if not user:
        raise Unauthorized("invalid token: unknown user")
    return Principal.of(user)
