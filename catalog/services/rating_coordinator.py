"""
Rating Transaction Coordinator

Runs one rating mutation (add, update, or remove) end-to-end as a single
all-or-nothing database transaction:

1. Lock the book row (SELECT ... FOR UPDATE)
2. Look up the caller's existing rating of that book
3. Compute the new aggregate block (catalog.services.aggregates)
4. Write the aggregate block and the rating row
5. Commit

Any failure between steps 1 and 5 rolls the whole transaction back, so
the aggregate block on the book and the rows of the ratings table never
diverge. The row lock serializes concurrent mutations of the same book;
mutations of different books run fully in parallel.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.exceptions import (
    AlreadyRated,
    CatalogError,
    NoChange,
    NoPriorRating,
    RatingValidationError,
    StorageError,
)
from catalog.models import Book
from catalog.services.aggregates import (
    AggregateUpdate,
    RatingAggregate,
    apply_add,
    apply_change,
    apply_remove,
    is_star,
)
from catalog.services.rating_store import RatingStore

logger = logging.getLogger(__name__)


class RatingTransactionCoordinator:
    """
    Orchestrates rating mutations against one database session.

    The session's current transaction is the unit of work: it is
    committed when the mutation succeeds and rolled back otherwise.

    Usage:
        coordinator = RatingTransactionCoordinator(db)
        book = coordinator.add(account_id=7, book_id=42, value=5)
    """

    def __init__(self, session: Session, store: RatingStore | None = None) -> None:
        self.session = session
        self.store = store or RatingStore(session)

    # -------------------------------------------------------------------------
    # Transaction Boundary
    # -------------------------------------------------------------------------
    @contextmanager
    def _transaction(self, action: str, target: str) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except CatalogError as exc:
            self.session.rollback()
            logger.info(f"Rating {action} rejected for {target}: {exc.message}")
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(
                f"Rating {action} transaction failed for {target}: {exc}",
                exc_info=True,
            )
            raise StorageError() from exc
        except Exception:
            self.session.rollback()
            logger.error(f"Rating {action} aborted for {target}", exc_info=True)
            raise

    def _persist(self, book_id: int, update: AggregateUpdate) -> None:
        self.store.write_aggregate(
            book_id,
            update.aggregate.count,
            update.aggregate.average,
            update.star_delta,
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------
    def add(self, account_id: int, book_id: int, value: int) -> Book:
        """
        Record a new rating.

        Raises:
            BookNotFound: If the book does not exist
            AlreadyRated: If the account already rated the book
            RatingValidationError: If value is not a star value
            StorageError: If the transaction failed
        """
        with self._transaction("add", f"account {account_id} on book {book_id}"):
            book = self.store.lock_book(book_id)

            previous = self.store.get_user_rating(account_id, book_id)
            if previous is not None:
                raise AlreadyRated(account_id, book_id, previous)

            if not is_star(value):
                raise RatingValidationError()

            update = apply_add(RatingAggregate.from_book(book), value)
            self._persist(book_id, update)
            self.store.insert_rating(account_id, book_id, value)

        logger.info(f"Account {account_id} rated book {book_id} with {value} stars")
        return book

    def update(self, account_id: int, book_id: int, new_value: int) -> Book:
        """
        Change the star value of an existing rating.

        Raises:
            BookNotFound: If the book does not exist
            NoPriorRating: If the account has not rated the book
            NoChange: If new_value equals the current rating
            RatingValidationError: If new_value is not a star value
            StorageError: If the transaction failed
        """
        with self._transaction("update", f"account {account_id} on book {book_id}"):
            book = self.store.lock_book(book_id)

            previous = self.store.get_user_rating(account_id, book_id)
            if previous is None:
                raise NoPriorRating(
                    account_id, book_id, "User has not rated this book yet."
                )

            if not is_star(new_value):
                raise RatingValidationError()
            if new_value == previous:
                raise NoChange(account_id, book_id, new_value)

            update = apply_change(RatingAggregate.from_book(book), previous, new_value)
            self._persist(book_id, update)
            self.store.update_rating_value(account_id, book_id, new_value)

        logger.info(
            f"Account {account_id} changed rating of book {book_id} "
            f"from {previous} to {new_value} stars"
        )
        return book

    def remove(self, account_id: int, book_id: int) -> Book:
        """
        Withdraw an existing rating.

        Raises:
            BookNotFound: If the book does not exist
            NoPriorRating: If the account has not rated the book
            StorageError: If the transaction failed
        """
        with self._transaction("remove", f"account {account_id} on book {book_id}"):
            book = self.store.lock_book(book_id)

            previous = self.store.get_user_rating(account_id, book_id)
            if previous is None:
                raise NoPriorRating(account_id, book_id)

            update = apply_remove(RatingAggregate.from_book(book), previous)
            self._persist(book_id, update)
            self.store.delete_rating(account_id, book_id)

        logger.info(f"Account {account_id} removed rating of book {book_id}")
        return book

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------
    def rebuild(self, book_id: int) -> Book:
        """
        Recompute a book's aggregate block from its rating rows.

        Discards the floating-point drift of the incremental average and
        repairs blocks written outside the coordinator. Takes the same
        row lock as the mutations, so it is safe on a live database.

        Raises:
            BookNotFound: If the book does not exist
            StorageError: If the transaction failed
        """
        with self._transaction("rebuild", f"book {book_id}"):
            book = self.store.lock_book(book_id)
            exact = RatingAggregate.from_histogram(self.store.count_ratings(book_id))
            self.store.overwrite_aggregate(
                book_id, exact.count, exact.average, exact.histogram
            )

        logger.info(
            f"Rebuilt aggregate of book {book_id}: count={exact.count}, "
            f"avg={exact.average:.4f}"
        )
        return book
