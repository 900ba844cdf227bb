from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

class FileCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: str = Field(default="application/octet-stream", min_length=1, max_length=127)
    size: int = Field(ge=0, description="Size in bytes")
    project_id: Optional[str] = None

class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    key: str
    name: str
    type: str
    size: int
    owner_id: str
    project_id: Optional[str] = None
    original_sender_email: Optional[str] = None
    status: str
    created_at: datetime

class FileCreated(FileOut):
    upload_url: str

class FileListItem(FileOut):
    owner_email: str
    is_owner: bool
    shared_by_email: Optional[str] = None
    shared_to_emails: List[str] = Field(default_factory=list)

class FileList(BaseModel):
    items: List[FileListItem]

class SignedUrlOut(BaseModel):
    url: str
    expires_at: datetime
