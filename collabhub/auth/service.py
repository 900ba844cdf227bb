import logging
import uuid, bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collabhub.auth.models import User
from collabhub.sharing.service import claim_invites

logger = logging.getLogger(__name__)

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def _hash(pw: str) -> str:
    return bcrypt.hashpw(pw.encode(), bcrypt.gensalt()).decode()

def _verify(pw: str, ph: str) -> bool:
    try:
        return bcrypt.checkpw(pw.encode(), ph.encode())
    except ValueError:
        # unusable hash (e.g. the demo account)
        return False

def find_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()

def register_user(db: Session, email: str, password: str, role: str = "user") -> dict:
    email = normalize_email(email)
    if find_user_by_email(db, email):
        raise ValueError("email_already_registered")
    u = User(id=str(uuid.uuid4()), email=email, password_hash=_hash(password), role=role)
    db.add(u)
    try:
        db.flush()
    except IntegrityError:
        # lost a race with a concurrent registration of the same address
        db.rollback()
        raise ValueError("email_already_registered")
    claimed = claim_invites(db, u)
    db.commit()
    db.refresh(u)
    logger.info("Registered user %s (%d pending share(s) claimed)", u.id, claimed)
    return {"id": u.id, "email": u.email, "role": u.role, "claimed_shares": claimed}

def authenticate_user(db: Session, email: str, password: str) -> dict | None:
    u = find_user_by_email(db, email)
    if not u or not _verify(password, u.password_hash):
        return None
    return {"sub": u.id, "email": u.email, "role": u.role}
