from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, DateTime, Integer, BigInteger, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from collabhub.shared.db import Base
import uuid

def _id32() -> str:
    return uuid.uuid4().hex

def _now() -> datetime:
    return datetime.now(timezone.utc)

class File(Base):
    __tablename__ = "files"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    # opaque object-store key; one row per stored object
    key: Mapped[str] = mapped_column(String(512), unique=True, index=True)

    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(127))
    size: Mapped[int] = mapped_column(BigInteger, default=0)

    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    project_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    # only set on legacy rows that were copied to a recipient instead of granted
    original_sender_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    status: Mapped[str] = mapped_column(String(16), default="pending")  # pending|ready

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)

    owner: Mapped["User"] = relationship(lazy="joined")  # noqa: F821
    project: Mapped[Optional["Project"]] = relationship(back_populates="files")  # noqa: F821
    grants: Mapped[list["SharedFile"]] = relationship(
        back_populates="file", cascade="all, delete-orphan", passive_deletes=True,
        order_by="SharedFile.created_at",
    )

class SharedFile(Base):
    __tablename__ = "shared_files"
    __table_args__ = (UniqueConstraint("file_id", "shared_with_user_id", name="uq_shared_file_recipient"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    file_id: Mapped[str] = mapped_column(String(32), ForeignKey("files.id", ondelete="CASCADE"), index=True)
    shared_with_user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    shared_by_user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"))
    permissions: Mapped[str] = mapped_column(String(16), default="read")  # read
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    file: Mapped[File] = relationship(back_populates="grants")
    shared_with: Mapped["User"] = relationship(foreign_keys=[shared_with_user_id], lazy="joined")  # noqa: F821
    shared_by: Mapped["User"] = relationship(foreign_keys=[shared_by_user_id], lazy="joined")  # noqa: F821

class OrphanedObject(Base):
    """Storage keys whose row is gone but whose object could not be deleted."""
    __tablename__ = "orphaned_objects"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    last_error: Mapped[str] = mapped_column(Text, default="")
    attempts: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)
