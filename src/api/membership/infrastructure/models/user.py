"""SQLAlchemy ORM model for the users table."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """ORM model for users table.

    The two-factor columns hold the requirement derived from the user's
    groups; they are rewritten whenever a group changes its policy.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    require_two_factor_authentication_from_group: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    two_factor_grace_period: Mapped[int] = mapped_column(
        Integer, nullable=False, default=48
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, username={self.username})>"
