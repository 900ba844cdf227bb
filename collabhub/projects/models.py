from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from collabhub.shared.db import Base
import uuid

def _id32() -> str:
    return uuid.uuid4().hex

class Project(Base):
    __tablename__ = "projects"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    name: Mapped[str] = mapped_column(String(200))
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    # member files are removed one by one through the file lifecycle, never via ORM cascade
    files: Mapped[list["File"]] = relationship(back_populates="project", passive_deletes=True)  # noqa: F821
