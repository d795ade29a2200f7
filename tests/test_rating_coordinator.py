"""
Tests for RatingTransactionCoordinator.

Each test checks both the outcome and that the aggregate block on the
book still agrees with the rating rows afterwards.
"""

import pytest
from sqlalchemy.exc import OperationalError

from catalog.exceptions import (
    AlreadyRated,
    BookNotFound,
    NoChange,
    NoPriorRating,
    RatingValidationError,
    StorageError,
)
from catalog.services.rating_coordinator import RatingTransactionCoordinator
from catalog.services.rating_store import RatingStore
from tests.conftest import make_account, reload


@pytest.fixture
def coordinator(db_session) -> RatingTransactionCoordinator:
    return RatingTransactionCoordinator(db_session)


def assert_block_matches_rows(db_session, book):
    book = reload(db_session, book)
    histogram = RatingStore(db_session).count_ratings(book.id)
    assert book.histogram == histogram
    assert book.rating_count == sum(histogram)
    if book.rating_count == 0:
        assert book.rating_avg == 0
    else:
        weighted = sum(star * n for star, n in zip(range(1, 6), histogram))
        assert book.rating_avg == pytest.approx(weighted / book.rating_count)


class TestAdd:
    def test_first_rating(self, db_session, coordinator, reader, sample_book):
        book = coordinator.add(reader.id, sample_book.id, 4)

        assert book.rating_count == 1
        assert book.rating_avg == 4.0
        assert book.rating_4_star == 1
        assert RatingStore(db_session).get_user_rating(reader.id, sample_book.id) == 4
        assert_block_matches_rows(db_session, sample_book)

    def test_updates_existing_block(self, coordinator, reader, rated_book):
        book = coordinator.add(reader.id, rated_book.id, 5)

        assert book.rating_count == 10
        assert book.rating_avg == pytest.approx(4.1)
        assert book.rating_5_star == 6

    def test_already_rated(self, db_session, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 3)

        with pytest.raises(AlreadyRated) as exc_info:
            coordinator.add(reader.id, sample_book.id, 5)

        assert exc_info.value.previous_rating == 3
        book = reload(db_session, sample_book)
        assert book.rating_count == 1
        assert book.histogram == (0, 0, 1, 0, 0)

    def test_missing_book(self, coordinator, reader):
        with pytest.raises(BookNotFound):
            coordinator.add(reader.id, 99999, 3)

    @pytest.mark.parametrize("value", [0, 6, True, 4.0])
    def test_rejects_invalid_value(self, db_session, coordinator, reader, sample_book, value):
        with pytest.raises(RatingValidationError):
            coordinator.add(reader.id, sample_book.id, value)

        assert reload(db_session, sample_book).rating_count == 0

    def test_several_accounts(self, db_session, coordinator, reader, second_reader, sample_book):
        third = make_account(db_session, "third_reader")

        coordinator.add(reader.id, sample_book.id, 5)
        coordinator.add(second_reader.id, sample_book.id, 2)
        book = coordinator.add(third.id, sample_book.id, 2)

        assert book.rating_count == 3
        assert book.rating_avg == pytest.approx(3.0)
        assert book.histogram == (0, 2, 0, 0, 1)
        assert_block_matches_rows(db_session, sample_book)


class TestUpdate:
    def test_changes_rating(self, db_session, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 5)

        book = coordinator.update(reader.id, sample_book.id, 3)

        assert book.rating_count == 1
        assert book.rating_avg == pytest.approx(3.0)
        assert book.histogram == (0, 0, 1, 0, 0)
        assert RatingStore(db_session).get_user_rating(reader.id, sample_book.id) == 3
        assert_block_matches_rows(db_session, sample_book)

    def test_no_prior_rating(self, coordinator, reader, sample_book):
        with pytest.raises(NoPriorRating) as exc_info:
            coordinator.update(reader.id, sample_book.id, 3)

        assert exc_info.value.message == "User has not rated this book yet."

    def test_same_value(self, db_session, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 4)

        with pytest.raises(NoChange):
            coordinator.update(reader.id, sample_book.id, 4)

        book = reload(db_session, sample_book)
        assert book.histogram == (0, 0, 0, 1, 0)

    def test_rejects_float_value(self, db_session, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 4)

        with pytest.raises(RatingValidationError):
            coordinator.update(reader.id, sample_book.id, 3.0)

        assert RatingStore(db_session).get_user_rating(reader.id, sample_book.id) == 4
        assert reload(db_session, sample_book).histogram == (0, 0, 0, 1, 0)

    def test_missing_book(self, coordinator, reader):
        with pytest.raises(BookNotFound):
            coordinator.update(reader.id, 99999, 3)


class TestRemove:
    def test_last_rating_resets_block(self, db_session, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 2)

        book = coordinator.remove(reader.id, sample_book.id)

        assert book.rating_count == 0
        assert book.rating_avg == 0
        assert book.histogram == (0, 0, 0, 0, 0)
        assert RatingStore(db_session).get_user_rating(reader.id, sample_book.id) is None

    def test_no_prior_rating(self, coordinator, reader, sample_book):
        with pytest.raises(NoPriorRating) as exc_info:
            coordinator.remove(reader.id, sample_book.id)

        assert exc_info.value.message == "User has not rated this book."

    def test_add_then_remove_restores_block(self, db_session, coordinator, reader, rated_book):
        coordinator.add(reader.id, rated_book.id, 1)
        book = coordinator.remove(reader.id, rated_book.id)

        assert book.rating_count == 9
        assert book.rating_avg == pytest.approx(4.0)
        assert book.histogram == (0, 0, 1, 3, 5)

    def test_can_rate_again_after_remove(self, coordinator, reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 2)
        coordinator.remove(reader.id, sample_book.id)

        book = coordinator.add(reader.id, sample_book.id, 5)

        assert book.rating_count == 1
        assert book.rating_avg == 5.0


class TestRollback:
    def test_failed_insert_leaves_block_untouched(
        self, db_session, coordinator, reader, rated_book, monkeypatch
    ):
        def fail(*args, **kwargs):
            raise OperationalError("INSERT INTO ratings", {}, Exception("disk I/O error"))

        monkeypatch.setattr(coordinator.store, "insert_rating", fail)

        with pytest.raises(StorageError) as exc_info:
            coordinator.add(reader.id, rated_book.id, 5)

        assert "disk" not in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, OperationalError)

        book = reload(db_session, rated_book)
        assert book.rating_count == 9
        assert book.rating_avg == pytest.approx(4.0)
        assert book.histogram == (0, 0, 1, 3, 5)
        assert RatingStore(db_session).get_user_rating(reader.id, rated_book.id) is None

    def test_failed_update_keeps_previous_value(
        self, db_session, coordinator, reader, sample_book, monkeypatch
    ):
        coordinator.add(reader.id, sample_book.id, 5)

        def fail(*args, **kwargs):
            raise OperationalError("UPDATE ratings", {}, Exception("connection lost"))

        monkeypatch.setattr(coordinator.store, "update_rating_value", fail)

        with pytest.raises(StorageError):
            coordinator.update(reader.id, sample_book.id, 1)

        book = reload(db_session, sample_book)
        assert book.histogram == (0, 0, 0, 0, 1)
        assert RatingStore(db_session).get_user_rating(reader.id, sample_book.id) == 5


class TestRebuild:
    def test_repairs_drifted_block(self, db_session, coordinator, reader, second_reader, sample_book):
        coordinator.add(reader.id, sample_book.id, 4)
        coordinator.add(second_reader.id, sample_book.id, 1)

        book = reload(db_session, sample_book)
        book.rating_avg = 4.9
        book.rating_3_star = 7
        db_session.commit()

        book = coordinator.rebuild(sample_book.id)

        assert book.rating_count == 2
        assert book.rating_avg == pytest.approx(2.5)
        assert book.histogram == (1, 0, 0, 1, 0)

    def test_rated_book_without_rows(self, coordinator, rated_book):
        book = coordinator.rebuild(rated_book.id)

        assert book.rating_count == 0
        assert book.rating_avg == 0

    def test_missing_book(self, coordinator):
        with pytest.raises(BookNotFound):
            coordinator.rebuild(99999)


class RecordingStore(RatingStore):
    """RatingStore that records the order of its calls."""

    def __init__(self, session):
        super().__init__(session)
        self.calls: list[str] = []

    def lock_book(self, book_id):
        self.calls.append("lock_book")
        return super().lock_book(book_id)

    def get_user_rating(self, account_id, book_id):
        self.calls.append("get_user_rating")
        return super().get_user_rating(account_id, book_id)

    def write_aggregate(self, *args):
        self.calls.append("write_aggregate")
        return super().write_aggregate(*args)

    def insert_rating(self, *args):
        self.calls.append("insert_rating")
        return super().insert_rating(*args)

    def update_rating_value(self, *args):
        self.calls.append("update_rating_value")
        return super().update_rating_value(*args)

    def delete_rating(self, *args):
        self.calls.append("delete_rating")
        return super().delete_rating(*args)


class TestLockOrdering:
    """
    The book row lock is taken before the prior rating is read and before
    anything is written, so mutations of one book cannot interleave.
    Blocking itself needs PostgreSQL, see test_concurrency.py.
    """

    @pytest.fixture
    def store(self, db_session) -> RecordingStore:
        return RecordingStore(db_session)

    def test_add(self, db_session, store, reader, sample_book):
        RatingTransactionCoordinator(db_session, store).add(reader.id, sample_book.id, 4)

        assert store.calls == ["lock_book", "get_user_rating", "write_aggregate", "insert_rating"]

    def test_update(self, db_session, store, reader, sample_book):
        coordinator = RatingTransactionCoordinator(db_session, store)
        coordinator.add(reader.id, sample_book.id, 4)
        store.calls.clear()

        coordinator.update(reader.id, sample_book.id, 2)

        assert store.calls == [
            "lock_book",
            "get_user_rating",
            "write_aggregate",
            "update_rating_value",
        ]

    def test_remove(self, db_session, store, reader, sample_book):
        coordinator = RatingTransactionCoordinator(db_session, store)
        coordinator.add(reader.id, sample_book.id, 4)
        store.calls.clear()

        coordinator.remove(reader.id, sample_book.id)

        assert store.calls == ["lock_book", "get_user_rating", "write_aggregate", "delete_rating"]

    def test_rejection_happens_under_lock(self, db_session, store, reader, sample_book):
        coordinator = RatingTransactionCoordinator(db_session, store)
        coordinator.add(reader.id, sample_book.id, 4)
        store.calls.clear()

        with pytest.raises(AlreadyRated):
            coordinator.add(reader.id, sample_book.id, 5)

        assert store.calls == ["lock_book", "get_user_rating"]
