"""
Account Model

The catalog's view of a registered account. Credentials live with the
account service that issues access tokens; this table only records the
identity a token refers to and what the account may do.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

if TYPE_CHECKING:
    from catalog.models.rating import Rating


class Account(Base):
    """
    Account model.

    Table: accounts

    Relationships:
    - ratings: One-to-Many relationship with Rating
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Whether the account may use the API"
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Whether the account may create and delete books"
    )

    ratings: Mapped[list["Rating"]] = relationship(
        "Rating",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"Account(id={self.id}, username='{self.username}')"
