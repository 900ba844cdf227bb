from pydantic import BaseModel, Field
from typing import List, Optional

class ShareIn(BaseModel):
    file_key: str = Field(min_length=1)
    emails: List[str] = Field(min_length=1, description="Recipient addresses")

class SharedItem(BaseModel):
    file_name: str
    sender_email: str
    recipient_email: str

class ShareOut(BaseModel):
    items: List[SharedItem]
    unregistered: List[str] = Field(default_factory=list)
    already_shared: List[str] = Field(default_factory=list)

class SharedAccessOut(BaseModel):
    file_id: str
    is_owner: bool
    shared_by_email: Optional[str] = None
    shared_to_emails: List[str] = Field(default_factory=list)
