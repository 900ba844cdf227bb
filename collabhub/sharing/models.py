from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from collabhub.shared.db import Base
import uuid

def _id32() -> str:
    return uuid.uuid4().hex

class ShareInvite(Base):
    """A share addressed to an email that has no account yet; claimed on registration."""
    __tablename__ = "share_invites"
    __table_args__ = (UniqueConstraint("file_id", "email", name="uq_share_invite_email"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    file_id: Mapped[str] = mapped_column(String(32), ForeignKey("files.id", ondelete="CASCADE"), index=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    invited_by_user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    file: Mapped["File"] = relationship()  # noqa: F821
