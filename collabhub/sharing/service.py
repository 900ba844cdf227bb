# collabhub/sharing/service.py
import html
import logging
from dataclasses import dataclass, field

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collabhub.auth.models import User
from collabhub.files.models import File, SharedFile
from collabhub.files.service import can_manage, can_read, describe_access, get_file, get_file_by_key
from collabhub.notifications.service import Notification
from collabhub.sharing.models import ShareInvite
from collabhub.shared.auth import Principal
from collabhub.shared.config import settings
from collabhub.shared.errors import Forbidden, ValidationError

logger = logging.getLogger(__name__)

_email = TypeAdapter(EmailStr)

SUBJECT = "Files Shared with You"


@dataclass
class ShareOutcome:
    items: list[dict] = field(default_factory=list)
    unregistered: list[str] = field(default_factory=list)
    already_shared: list[str] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"items": self.items, "unregistered": self.unregistered, "already_shared": self.already_shared}


def _check_addresses(emails: list[str], principal: Principal) -> list[str]:
    """Normalise + dedupe. Raises one ValidationError naming every bad address."""
    seen, clean, problems = set(), [], []
    for raw in emails:
        addr = (raw or "").strip().lower()
        if addr in seen:
            continue
        seen.add(addr)
        try:
            _email.validate_python(addr)
        except PydanticValidationError:
            problems.append({"item": raw, "reason": "malformed"})
            continue
        if addr == principal.email.lower():
            problems.append({"item": raw, "reason": "self_share"})
            continue
        clean.append(addr)
    if problems:
        raise ValidationError("Some addresses cannot receive this file", problems)
    return clean


def _grant(db: Session, file: File, recipient: User, sharer_id: str) -> bool:
    """Create the grant unless it exists. Returns False for a no-op."""
    exists = db.scalars(
        select(SharedFile.id).where(
            SharedFile.file_id == file.id, SharedFile.shared_with_user_id == recipient.id
        )
    ).first()
    if exists:
        return False
    try:
        with db.begin_nested():
            db.add(SharedFile(file_id=file.id, shared_with_user_id=recipient.id, shared_by_user_id=sharer_id))
    except IntegrityError:
        # a concurrent share won the race; same end state
        return False
    return True


def _invite(db: Session, file: File, email: str, inviter_id: str) -> bool:
    exists = db.scalars(
        select(ShareInvite.id).where(ShareInvite.file_id == file.id, ShareInvite.email == email)
    ).first()
    if exists:
        return False
    try:
        with db.begin_nested():
            db.add(ShareInvite(file_id=file.id, email=email, invited_by_user_id=inviter_id))
    except IntegrityError:
        return False
    return True


def _shared_email(file_names: list[str], sender: str, registered: bool) -> tuple[str, str]:
    link = f"{settings.APP_URL.rstrip('/')}/file-upload"
    text = f"Files have been shared with you: {', '.join(file_names)}."
    items = "".join(f"<li>{html.escape(n)} (shared by: {html.escape(sender)})</li>" for n in file_names)
    body = (
        "<p>The following files have been shared with you:</p>"
        f"<ul>{items}</ul>"
    )
    if registered:
        body += f'<p>Access the files through the following link: <a href="{link}">View Shared Files</a></p>'
    else:
        text += f" Create an account with this address to access them: {link}"
        body += f'<p>Create an account with this address to access them: <a href="{link}">Sign up</a></p>'
    return text, body


def share_file(db: Session, principal: Principal, file_key: str, emails: list[str]) -> ShareOutcome:
    f = get_file_by_key(db, file_key)
    if not can_manage(f, principal):
        logger.info("User %s not authorized to share file %s", principal.id, f.id)
        raise Forbidden("Not authorized to share this file")

    # validate everything before touching any grant
    addresses = _check_addresses(emails, principal)
    if not addresses:
        raise ValidationError("No recipients given", [{"item": "", "reason": "empty"}])

    out = ShareOutcome()
    notify: list[tuple[str, bool]] = []
    for addr in addresses:
        user = db.scalars(select(User).where(User.email == addr)).first()
        if user is None:
            out.unregistered.append(addr)
            if _invite(db, f, addr, principal.id):
                notify.append((addr, False))
            continue
        if user.id == f.owner_id or not _grant(db, f, user, principal.id):
            out.already_shared.append(addr)
            continue
        out.items.append({"file_name": f.name, "sender_email": principal.email, "recipient_email": addr})
        notify.append((addr, True))
    db.commit()

    for addr, registered in notify:
        text, body = _shared_email([f.name], principal.email, registered)
        out.notifications.append(Notification(to=addr, subject=SUBJECT, text=text, html=body))

    logger.info(
        "File %s shared by %s: %d granted, %d invited, %d already shared",
        f.id, principal.id, len(out.items), len(out.unregistered), len(out.already_shared),
    )
    return out


def get_shared_access(db: Session, principal: Principal, file_id: str) -> dict:
    f = get_file(db, file_id)
    if not can_read(f, principal):
        raise Forbidden("Not allowed to view sharing for this file")
    return {"file_id": f.id, **describe_access(f, principal.id)}


def claim_invites(db: Session, user: User) -> int:
    """Turn pending invites for user's email into grants. Caller commits."""
    invites = db.scalars(select(ShareInvite).where(ShareInvite.email == user.email)).all()
    claimed = 0
    for inv in invites:
        if _grant(db, inv.file, user, inv.invited_by_user_id):
            claimed += 1
        db.delete(inv)
    return claimed
