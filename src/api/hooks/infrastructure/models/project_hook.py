"""SQLAlchemy ORM model for the project_hooks table."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class ProjectHookModel(Base, TimestampMixin):
    """ORM model for project_hooks table.

    Foreign Key Constraint:
    - project_id references projects.id with CASCADE delete
    """

    __tablename__ = "project_hooks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    push_events: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    issues_events: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    merge_requests_events: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    tag_push_events: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    note_events: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_events: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pipeline_events: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    wiki_page_events: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    enable_ssl_verification: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ProjectHookModel(id={self.id}, project_id={self.project_id})>"
