"""
Rating Model

One account's star rating of one book.

Business Rules:
- At most one rating per (account, book) pair (composite primary key)
- Rating must be 1-5
- A rating never outlives its book (ON DELETE CASCADE)
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base


class Rating(Base):
    """
    Rating fact record.

    Attributes:
        account_id: Account that rated the book
        book_id: Book being rated
        rating: 1-5 star value
    """

    __tablename__ = "ratings"

    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )

    book = relationship("Book", back_populates="ratings")
    account = relationship("Account", back_populates="ratings")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<Rating(account_id={self.account_id}, book_id={self.book_id}, "
            f"rating={self.rating})>"
        )
