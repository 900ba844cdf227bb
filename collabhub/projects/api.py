from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from collabhub.shared.db import get_db
from collabhub.shared.auth import Principal, get_principal
from collabhub.shared.http import ok
from collabhub.files.storage import ObjectStore, get_object_store
from collabhub.projects.schemas import ProjectCreate, ProjectUpdate, ProjectOut, ProjectList
from collabhub.projects.service import create_project, list_projects, rename_project, delete_project

router = APIRouter(prefix="/projects", tags=["Projects"])

@router.post("", response_model=ProjectOut, status_code=201)
def create_proj(payload: ProjectCreate, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return create_project(db, principal, payload.name)

@router.get("", response_model=ProjectList)
def list_proj(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return {"items": list_projects(db, principal)}

@router.patch("/{project_id}", response_model=ProjectOut)
def rename_proj(
    project_id: str,
    payload: ProjectUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return rename_project(db, principal, project_id, payload.name)

@router.delete("/{project_id}")
def delete_proj(
    project_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    out = delete_project(db, store, principal, project_id)
    return ok({"project_id": project_id, "deleted_files": out["deleted_files"]}, warnings=out["warnings"])
