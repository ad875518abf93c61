"""User model."""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from user_service.database import Base
from user_service.models.base import TimestampMixin


class User(TimestampMixin, Base):
    """Application user.

    ``password`` holds the bcrypt hash. It is deferred and raises on implicit
    access, so only queries that explicitly undefer it (the login lookup) can
    read it.
    """

    __tablename__ = "Users"
    # The column is signed; ids are kept strictly positive
    __table_args__ = (CheckConstraint("id > 0", name="ck_users_id_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        deferred=True,
        deferred_raiseload=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
