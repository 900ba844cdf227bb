from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from collabhub.shared.db import get_db
from collabhub.shared.auth import Principal, get_principal
from collabhub.shared.http import ok
from collabhub.files.schemas import FileCreate, FileCreated, FileList, FileOut, SignedUrlOut
from collabhub.files.service import (
    create_file, list_files, download_url, confirm_upload, delete_file, purge_orphans,
)
from collabhub.files.storage import ObjectStore, get_object_store

router = APIRouter(prefix="/files", tags=["Files"])

@router.post("", response_model=FileCreated, status_code=201)
def create(
    payload: FileCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    rec, upload_url = create_file(db, store, principal, payload)
    return {**FileOut.model_validate(rec).model_dump(), "upload_url": upload_url}

@router.get("", response_model=FileList)
def list_all(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return {"items": list_files(db, principal)}

@router.get("/by-key/download", response_model=SignedUrlOut)
def file_download(
    key: str = Query(..., min_length=1),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    url, expires = download_url(db, store, principal, key)
    return {"url": url, "expires_at": expires}

@router.post("/maintenance/purge-orphans")
def purge(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    return ok(purge_orphans(db, store, principal))

@router.post("/{file_id}/confirm", response_model=FileOut)
def confirm(
    file_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    return confirm_upload(db, store, principal, file_id)

@router.delete("/{file_id}")
def remove(
    file_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    warnings = delete_file(db, store, principal, file_id)
    return ok({"file_id": file_id}, warnings=warnings)
