# collabhub/sharing/api.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from collabhub.shared.db import get_db
from collabhub.shared.auth import Principal, get_principal
from collabhub.shared.http import ok
from collabhub.notifications.service import Notifier, dispatch, get_notifier
from collabhub.sharing.schemas import ShareIn, ShareOut, SharedAccessOut
from collabhub.sharing.service import share_file, get_shared_access

# mounted under /files next to the lifecycle routes
router = APIRouter(prefix="/files", tags=["Sharing"])

@router.post("/share")
def api_share(
    payload: ShareIn,
    background: BackgroundTasks,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    out = share_file(db, principal, payload.file_key, payload.emails)
    # grants are committed; mail goes out after the response
    background.add_task(dispatch, notifier, out.notifications)
    return ok(ShareOut(**out.as_dict()).model_dump())

@router.get("/{file_id}/access", response_model=SharedAccessOut)
def api_access(file_id: str, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return get_shared_access(db, principal, file_id)
