from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import List

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)

class ProjectUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=200)

class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    owner_id: str
    created_at: datetime

class ProjectList(BaseModel):
    items: List[ProjectOut]
