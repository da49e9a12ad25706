"""SQLAlchemy ORM models for groups and the rows owned by a group.

Group rows form a tree through parent_id. Memberships and secret variables
belong to exactly one group and are removed with it.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class GroupModel(Base, TimestampMixin):
    """ORM model for groups table.

    Foreign Key Constraint:
    - parent_id references groups.id with CASCADE delete
      Deleting a group deletes its whole subtree

    Uniqueness:
    - (parent_id, path) and (parent_id, name) are unique among siblings
    - Top-level groups (parent_id IS NULL) use partial unique indexes, since
      NULLs never collide in a plain unique constraint
    """

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visibility_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)
    require_two_factor_authentication: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    two_factor_grace_period: Mapped[int] = mapped_column(
        Integer, nullable=False, default=48
    )
    lfs_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    request_access_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "path", name="uq_groups_parent_id_path"),
        UniqueConstraint("parent_id", "name", name="uq_groups_parent_id_name"),
        Index(
            "uq_groups_top_level_path",
            "path",
            unique=True,
            postgresql_where=text("parent_id IS NULL"),
        ),
        Index(
            "uq_groups_top_level_name",
            "name",
            unique=True,
            postgresql_where=text("parent_id IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupModel(id={self.id}, parent_id={self.parent_id}, path={self.path})>"
        )


class GroupMemberModel(Base, TimestampMixin):
    """ORM model for group_members table.

    One row per (group, user). The state column distinguishes active
    memberships from pending access requests.
    """

    __tablename__ = "group_members"

    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    access_level: Mapped[int] = mapped_column(Integer, nullable=False)
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    requested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupMemberModel(group_id={self.group_id}, user_id={self.user_id}, "
            f"access_level={self.access_level}, state={self.state})>"
        )


class GroupVariableModel(Base, TimestampMixin):
    """ORM model for group_variables table.

    Keys are unique within a group. Values are stored as given; encryption
    at rest is handled by the database deployment.
    """

    __tablename__ = "group_variables"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    protected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("group_id", "key", name="uq_group_variables_group_id_key"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupVariableModel(id={self.id}, group_id={self.group_id}, "
            f"key={self.key})>"
        )
