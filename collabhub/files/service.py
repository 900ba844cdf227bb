# collabhub/files/service.py
"""
File lifecycle: create (reserve key + upload URL), list, download, confirm,
and delete (row first, then the stored object).
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, desc, or_
from sqlalchemy.orm import Session, selectinload

from collabhub.auth.models import User  # noqa: F401  (relationship target)
from collabhub.files.models import File, SharedFile, OrphanedObject
from collabhub.files.schemas import FileCreate, FileOut
from collabhub.files.storage import ObjectStore
from collabhub.projects.models import Project
from collabhub.shared.auth import Principal
from collabhub.shared.config import settings
from collabhub.shared.errors import Forbidden, NotFound, UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

# --- access rules ---

def is_recipient(file: File, user_id: str) -> bool:
    return any(g.shared_with_user_id == user_id for g in file.grants)

def can_read(file: File, principal: Principal) -> bool:
    return file.owner_id == principal.id or is_recipient(file, principal.id)

def can_manage(file: File, principal: Principal) -> bool:
    """Delete / re-share rights. Recipients only qualify under the owner_or_recipient policy."""
    if file.owner_id == principal.id:
        return True
    return settings.ACCESS_POLICY == "owner_or_recipient" and is_recipient(file, principal.id)

def describe_access(file: File, user_id: str) -> dict:
    is_owner = file.owner_id == user_id
    shared_by = None
    if not is_owner:
        mine = [g for g in file.grants if g.shared_with_user_id == user_id]
        if mine:
            shared_by = mine[0].shared_by.email
        else:
            shared_by = file.original_sender_email
    to = sorted({g.shared_with.email for g in file.grants})
    return {"is_owner": is_owner, "shared_by_email": shared_by, "shared_to_emails": to}

# --- lookups ---

def get_file(db: Session, file_id: str) -> File:
    f = db.get(File, file_id)
    if not f:
        raise NotFound("File not found", details={"file_id": file_id})
    return f

def get_file_by_key(db: Session, key: str) -> File:
    f = db.scalars(select(File).where(File.key == key)).first()
    if not f:
        raise NotFound("File not found", details={"key": key})
    return f

# --- operations ---

def create_file(db: Session, store: ObjectStore, principal: Principal, payload: FileCreate) -> tuple[File, str]:
    if payload.size > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            "File too large",
            [{"item": payload.name, "reason": f"size exceeds {settings.MAX_UPLOAD_BYTES} bytes"}],
        )
    if payload.project_id:
        project = db.get(Project, payload.project_id)
        if not project:
            raise NotFound("Project not found", details={"project_id": payload.project_id})
        if project.owner_id != principal.id:
            raise Forbidden("Not your project")

    target = store.issue_upload_target(payload.type, principal.id)
    rec = File(
        key=target.key,
        name=payload.name.strip(),
        type=payload.type,
        size=payload.size,
        owner_id=principal.id,
        project_id=payload.project_id,
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)
    logger.info("File %s created by %s (key=%s)", rec.id, principal.id, rec.key)
    return rec, target.upload_url

def list_files(db: Session, principal: Principal) -> list[dict]:
    shared_ids = select(SharedFile.file_id).where(SharedFile.shared_with_user_id == principal.id)
    stmt = (
        select(File)
        .where(or_(File.owner_id == principal.id, File.id.in_(shared_ids)))
        .options(selectinload(File.grants))
        .order_by(desc(File.created_at))
    )
    rows = db.scalars(stmt).unique().all()
    return [
        {
            **FileOut.model_validate(f).model_dump(),
            "owner_email": f.owner.email,
            **describe_access(f, principal.id),
        }
        for f in rows
    ]

def download_url(db: Session, store: ObjectStore, principal: Principal, key: str) -> tuple[str, datetime]:
    f = get_file_by_key(db, key)
    if not can_read(f, principal):
        raise Forbidden("Not allowed to download this file")
    url = store.issue_download_target(f.key)
    return url, datetime.now(timezone.utc) + timedelta(seconds=store.expires_in)

def confirm_upload(db: Session, store: ObjectStore, principal: Principal, file_id: str) -> File:
    f = get_file(db, file_id)
    if f.owner_id != principal.id:
        raise Forbidden("Only the owner can confirm an upload")
    if f.status == "ready":
        return f
    if not store.object_exists(f.key):
        raise ValidationError("Upload not found in storage", [{"item": f.key, "reason": "object_missing"}])
    f.status = "ready"
    db.commit()
    db.refresh(f)
    return f

def _record_orphan(db: Session, key: str, error: str) -> None:
    rec = db.get(OrphanedObject, key)
    if rec:
        rec.attempts += 1
        rec.last_error = error
    else:
        db.add(OrphanedObject(key=key, last_error=error))
    db.commit()

def remove_file(db: Session, store: ObjectStore, f: File) -> str | None:
    """
    Delete the row, then the object. The row is the source of truth, so an
    object-store failure afterwards is recorded for cleanup and returned as a
    warning instead of raised.
    """
    key, file_id = f.key, f.id
    db.delete(f)
    db.commit()
    try:
        store.delete_object(key)
    except UpstreamFailure as e:
        logger.warning("File %s deleted but object %s remains: %s", file_id, key, e.details)
        _record_orphan(db, key, str(e.details or e.message))
        return f"storage object {key} could not be deleted; queued for cleanup"
    return None

def delete_file(db: Session, store: ObjectStore, principal: Principal, file_id: str) -> list[str]:
    f = get_file(db, file_id)
    if not can_manage(f, principal):
        logger.info("User %s not authorized to delete file %s", principal.id, file_id)
        raise Forbidden("Not authorized to delete this file")
    warning = remove_file(db, store, f)
    logger.info("File %s deleted by %s", file_id, principal.id)
    return [warning] if warning else []

def purge_orphans(db: Session, store: ObjectStore, principal: Principal) -> dict:
    if not principal.is_admin:
        raise Forbidden("Admin only")
    purged, remaining = [], []
    for rec in db.scalars(select(OrphanedObject).order_by(OrphanedObject.created_at)).all():
        try:
            store.delete_object(rec.key)
        except UpstreamFailure as e:
            rec.attempts += 1
            rec.last_error = str(e.details or e.message)
            remaining.append(rec.key)
            continue
        db.delete(rec)
        purged.append(rec.key)
    db.commit()
    if purged or remaining:
        logger.info("Orphan purge: %d removed, %d still failing", len(purged), len(remaining))
    return {"purged": purged, "remaining": remaining}
