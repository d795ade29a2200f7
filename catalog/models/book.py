"""
Book Model

The central model of the catalog. Besides its bibliographic fields a book
carries a denormalized **aggregate rating block**:

- rating_count: number of ratings the book has received
- rating_avg: mean star value (0 when the book has no ratings)
- rating_1_star .. rating_5_star: per-star histogram

Invariant: rating_count == rating_1_star + ... + rating_5_star, and
rating_avg == 0 whenever rating_count == 0.

The block is written only by the rating coordinator while it holds the
book row lock. Listings read it directly instead of running AVG/COUNT
subqueries over the ratings table.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

if TYPE_CHECKING:
    from catalog.models.rating import Rating

STAR_VALUES = (1, 2, 3, 4, 5)


def star_column(star: int) -> str:
    """Name of the histogram column counting ``star``-star ratings."""
    return f"rating_{star}_star"


class Book(Base):
    """
    Book model representing one catalog entry.

    Table: books

    Example:
        book = Book(
            isbn13="9780439023480",
            authors="Suzanne Collins",
            publication_year=2008,
            original_title="The Hunger Games",
            title="The Hunger Games (The Hunger Games, #1)",
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Bibliographic Fields
    # -------------------------------------------------------------------------
    isbn13: Mapped[str] = mapped_column(
        String(13),
        unique=True,
        index=True,
        nullable=False,
        comment="13-digit ISBN"
    )

    authors: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Comma-separated author names"
    )

    publication_year: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Year of original publication"
    )

    original_title: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Title of the first edition"
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Title of this edition"
    )

    image_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Large cover image URL"
    )

    image_small_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Small cover image URL"
    )

    # -------------------------------------------------------------------------
    # Aggregate Rating Block
    # -------------------------------------------------------------------------
    rating_avg: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
        index=True,
        comment="Mean star rating, 0 when unrated"
    )
    rating_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of ratings"
    )
    rating_1_star: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_2_star: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_3_star: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_4_star: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_5_star: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    # passive_deletes lets the database cascade remove the rating rows
    ratings: Mapped[list["Rating"]] = relationship(
        "Rating",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("rating_count >= 0", name="ck_books_rating_count"),
        CheckConstraint(
            "rating_avg >= 0 AND rating_avg <= 5", name="ck_books_rating_avg"
        ),
        *(
            CheckConstraint(
                f"{star_column(star)} >= 0", name=f"ck_books_{star_column(star)}"
            )
            for star in STAR_VALUES
        ),
    )

    @property
    def histogram(self) -> tuple[int, ...]:
        """Star counters ordered from 1 star to 5 stars."""
        return tuple(getattr(self, star_column(star)) for star in STAR_VALUES)

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', isbn13='{self.isbn13}')"
