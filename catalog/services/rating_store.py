"""
Rating Store

Row-level access to the ratings table and to the aggregate block on
the books table.

The store never opens, commits, or rolls back a transaction: every
method runs inside the transaction of the session it was built with,
and the caller (the rating coordinator) owns that transaction.
Mutating methods assume the caller already holds the book row lock
from lock_book().
"""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from catalog.exceptions import BookNotFound
from catalog.models import Book, Rating
from catalog.models.book import STAR_VALUES, star_column

logger = logging.getLogger(__name__)


def lock_book_statement(book_id: int):
    """SELECT of one book row with an exclusive lock (FOR UPDATE)."""
    return (
        select(Book)
        .where(Book.id == book_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


class RatingStore:
    """
    Rating persistence bound to one database session.

    Usage:
        store = RatingStore(db)
        book = store.lock_book(book_id)
        previous = store.get_user_rating(account_id, book_id)
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def lock_book(self, book_id: int) -> Book:
        """
        Load a book with an exclusive row lock (SELECT ... FOR UPDATE).

        The lock is held until the enclosing transaction ends, so every
        rating mutation of the same book waits for this one.
        populate_existing makes sure an instance already in the session
        is refreshed with the row as it is once the lock is granted.

        Raises:
            BookNotFound: If no book has this id
        """
        book = self.session.execute(lock_book_statement(book_id)).scalar_one_or_none()
        if book is None:
            raise BookNotFound(book_id)
        return book

    def get_book(self, book_id: int) -> Book | None:
        """Load a book without locking it."""
        return self.session.get(Book, book_id, populate_existing=True)

    def get_user_rating(self, account_id: int, book_id: int) -> int | None:
        """Star value the account gave the book, or None if it never rated it."""
        stmt = select(Rating.rating).where(
            Rating.account_id == account_id,
            Rating.book_id == book_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def insert_rating(self, account_id: int, book_id: int, value: int) -> None:
        self.session.add(Rating(account_id=account_id, book_id=book_id, rating=value))
        self.session.flush()

    def update_rating_value(self, account_id: int, book_id: int, new_value: int) -> None:
        stmt = (
            update(Rating)
            .where(Rating.account_id == account_id, Rating.book_id == book_id)
            .values(rating=new_value)
        )
        self.session.execute(stmt)

    def delete_rating(self, account_id: int, book_id: int) -> None:
        stmt = delete(Rating).where(
            Rating.account_id == account_id,
            Rating.book_id == book_id,
        )
        self.session.execute(stmt)

    def count_ratings(self, book_id: int) -> tuple[int, ...]:
        """Histogram of the book's rating rows, ordered from 1 to 5 stars."""
        stmt = (
            select(Rating.rating, func.count())
            .where(Rating.book_id == book_id)
            .group_by(Rating.rating)
        )
        counts = dict(self.session.execute(stmt).all())
        return tuple(counts.get(star, 0) for star in STAR_VALUES)

    def overwrite_aggregate(
        self,
        book_id: int,
        count: int,
        average: float,
        histogram: tuple[int, ...],
    ) -> None:
        """Replace the whole aggregate block with absolute values."""
        values: dict = {"rating_count": count, "rating_avg": average}
        for star, n in zip(STAR_VALUES, histogram):
            values[star_column(star)] = n

        stmt = update(Book).where(Book.id == book_id).values(**values)
        self.session.execute(stmt)

    def write_aggregate(
        self,
        book_id: int,
        new_count: int,
        new_average: float,
        star_delta: dict[int, int],
    ) -> None:
        """
        Persist a recomputed aggregate block onto the book row.

        Count and average are written as absolute values. Histogram
        buckets are adjusted in SQL (rating_N_star = rating_N_star + delta)
        so only the buckets named in star_delta are touched.

        Args:
            book_id: Book whose block is written
            new_count: New rating_count
            new_average: New rating_avg
            star_delta: Bucket adjustments keyed by star value
        """
        values: dict = {"rating_count": new_count, "rating_avg": new_average}
        for star, delta in star_delta.items():
            column = star_column(star)
            values[column] = getattr(Book, column) + delta

        stmt = update(Book).where(Book.id == book_id).values(**values)
        self.session.execute(stmt)
        logger.debug(
            f"Aggregate written for book {book_id}: count={new_count}, "
            f"avg={new_average:.4f}, delta={star_delta}"
        )
