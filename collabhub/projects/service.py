import logging
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from collabhub.files.models import File
from collabhub.files.service import remove_file
from collabhub.files.storage import ObjectStore
from collabhub.projects.models import Project
from collabhub.shared.auth import Principal
from collabhub.shared.errors import Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)

def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required", [{"item": "name", "reason": "blank"}])
    return name

def get_owned_project(db: Session, principal: Principal, project_id: str) -> Project:
    project = db.get(Project, project_id)
    if not project:
        raise NotFound("Project not found", details={"project_id": project_id})
    if project.owner_id != principal.id:
        raise Forbidden("Not your project")
    return project

def create_project(db: Session, principal: Principal, name: str) -> Project:
    project = Project(name=_clean_name(name), owner_id=principal.id)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project %s created by %s", project.id, principal.id)
    return project

def list_projects(db: Session, principal: Principal) -> list[Project]:
    stmt = select(Project).where(Project.owner_id == principal.id).order_by(desc(Project.created_at))
    return list(db.scalars(stmt).all())

def rename_project(db: Session, principal: Principal, project_id: str, new_name: str) -> Project:
    project = get_owned_project(db, principal, project_id)
    project.name = _clean_name(new_name)
    db.commit()
    db.refresh(project)
    return project

def delete_project(db: Session, store: ObjectStore, principal: Principal, project_id: str) -> dict:
    """Delete member files through the file lifecycle (row + object each), then the project."""
    project = get_owned_project(db, principal, project_id)
    files = db.scalars(select(File).where(File.project_id == project.id)).all()
    warnings = []
    for f in files:
        warning = remove_file(db, store, f)
        if warning:
            warnings.append(warning)
    db.delete(project)
    db.commit()
    logger.info("Project %s deleted by %s with %d file(s)", project_id, principal.id, len(files))
    return {"deleted_files": len(files), "warnings": warnings}
