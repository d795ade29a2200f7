"""
Tests for RatingStore.

The store never commits; tests commit explicitly where they need to
observe what was written.
"""

import pytest
from sqlalchemy.dialects import postgresql

from catalog.exceptions import BookNotFound
from catalog.services.rating_store import RatingStore, lock_book_statement
from tests.conftest import reload


class TestLockBook:
    def test_returns_book(self, db_session, sample_book):
        book = RatingStore(db_session).lock_book(sample_book.id)

        assert book.id == sample_book.id

    def test_missing_book(self, db_session):
        with pytest.raises(BookNotFound) as exc_info:
            RatingStore(db_session).lock_book(99999)

        assert exc_info.value.book_id == 99999

    def test_statement_locks_row(self):
        sql = str(lock_book_statement(1).compile(dialect=postgresql.dialect()))

        assert "FOR UPDATE" in sql


class TestRatingRows:
    def test_no_rating(self, db_session, reader, sample_book):
        store = RatingStore(db_session)

        assert store.get_user_rating(reader.id, sample_book.id) is None

    def test_insert_update_delete(self, db_session, reader, sample_book):
        store = RatingStore(db_session)

        store.insert_rating(reader.id, sample_book.id, 4)
        assert store.get_user_rating(reader.id, sample_book.id) == 4

        store.update_rating_value(reader.id, sample_book.id, 2)
        assert store.get_user_rating(reader.id, sample_book.id) == 2

        store.delete_rating(reader.id, sample_book.id)
        assert store.get_user_rating(reader.id, sample_book.id) is None

    def test_count_ratings(self, db_session, reader, second_reader, sample_book):
        store = RatingStore(db_session)
        store.insert_rating(reader.id, sample_book.id, 5)
        store.insert_rating(second_reader.id, sample_book.id, 5)

        assert store.count_ratings(sample_book.id) == (0, 0, 0, 0, 2)

    def test_count_ratings_empty(self, db_session, sample_book):
        assert RatingStore(db_session).count_ratings(sample_book.id) == (0, 0, 0, 0, 0)


class TestWriteAggregate:
    def test_applies_bucket_deltas(self, db_session, rated_book):
        store = RatingStore(db_session)

        store.write_aggregate(rated_book.id, 9, 3.8, {5: -1, 3: 1})
        db_session.commit()

        book = reload(db_session, rated_book)
        assert book.rating_count == 9
        assert book.rating_avg == pytest.approx(3.8)
        assert book.histogram == (0, 0, 2, 3, 4)

    def test_untouched_buckets_keep_their_value(self, db_session, rated_book):
        RatingStore(db_session).write_aggregate(rated_book.id, 10, 3.7, {1: 1})
        db_session.commit()

        book = reload(db_session, rated_book)
        assert book.histogram == (1, 0, 1, 3, 5)

    def test_overwrite_aggregate(self, db_session, rated_book):
        RatingStore(db_session).overwrite_aggregate(rated_book.id, 0, 0.0, (0, 0, 0, 0, 0))
        db_session.commit()

        book = reload(db_session, rated_book)
        assert book.rating_count == 0
        assert book.rating_avg == 0
        assert book.histogram == (0, 0, 0, 0, 0)
