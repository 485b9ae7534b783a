import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.resource import Resource
    from app.models.user import User

# One live report per reporter and resource; resolved/dismissed rows are exempt
LIVE_REPORT_PREDICATE = text("status IN ('pending', 'reviewing')")


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        Index(
            "uq_reports_live_user_resource",
            "user_id",
            "resource_id",
            unique=True,
            postgresql_where=LIVE_REPORT_PREDICATE,
            sqlite_where=LIVE_REPORT_PREDICATE,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Who is making the report
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # What is being reported
    resource_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Type: inappropriate_content, copyright_violation, spam, misleading_title,
    # wrong_category, broken_file, other
    type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    reason: Mapped[str] = mapped_column(Text, nullable=False)

    # Optional evidence or context
    additional_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Status: pending, reviewing, resolved, dismissed
    status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False, index=True
    )

    # Priority: low, medium, high, urgent (derived from type, never edited)
    priority: Mapped[str] = mapped_column(
        String(10), default="medium", nullable=False, index=True
    )

    # Moderator who resolved this report
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Action: no_action, warning_issued, content_removed, user_suspended,
    # content_modified, category_changed
    action_taken: Mapped[str | None] = mapped_column(String(30), nullable=True)

    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Reporter metadata for abuse forensics
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    reporter: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    resource: Mapped["Resource"] = relationship("Resource")
    resolver: Mapped["User | None"] = relationship("User", foreign_keys=[resolved_by])
