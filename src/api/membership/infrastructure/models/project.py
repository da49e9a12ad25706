"""SQLAlchemy ORM models for projects and their protected refs."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class ProjectModel(Base, TimestampMixin):
    """ORM model for projects table.

    Foreign Key Constraint:
    - group_id references groups.id with CASCADE delete
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    default_branch: Mapped[str] = mapped_column(
        String(255), nullable=False, default="master"
    )
    empty_repo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ProjectModel(id={self.id}, name={self.name}, "
            f"group_id={self.group_id})>"
        )


class ProtectedBranchModel(Base):
    """ORM model for protected_branches table. Names may contain ``*``."""

    __tablename__ = "protected_branches"

    project_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(255), primary_key=True)


class ProtectedTagModel(Base):
    """ORM model for protected_tags table. Names may contain ``*``."""

    __tablename__ = "protected_tags"

    project_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(255), primary_key=True)
