"""
Rating Service

Entry point the HTTP layer uses for rating mutations.

Responsibilities:
- Validate the raw ``rating`` value from the request body
- Delegate the mutation to the RatingTransactionCoordinator
- Format the committed book as a BookView

Failures are raised as catalog.exceptions.RatingError subclasses, which
carry their own HTTP status and message; the application's exception
handler turns them into responses.
"""

import logging
from typing import Any

from catalog.exceptions import NoPriorRating, RatingValidationError
from catalog.models.book import STAR_VALUES
from catalog.schemas import BookView, RatingResponse, UserRating, UserRatingResponse
from catalog.services.rating_coordinator import RatingTransactionCoordinator

logger = logging.getLogger(__name__)

MISSING_RATING_MESSAGE = "Rating is not provided in body"
INVALID_RATING_MESSAGE = "Rating must be an integer between [1, 5]"


def validate_rating(raw: Any) -> int:
    """
    Turn a JSON rating value into a star value.

    Accepts JSON integers (and floats with no fractional part, since
    ``4.0`` and ``4`` are the same JSON number). Rejects missing values,
    booleans, strings, fractions, and anything outside 1-5.

    Raises:
        RatingValidationError: With a message naming what was wrong
    """
    if raw is None:
        raise RatingValidationError(MISSING_RATING_MESSAGE)

    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise RatingValidationError(INVALID_RATING_MESSAGE)

    if isinstance(raw, float):
        if not raw.is_integer():
            raise RatingValidationError(INVALID_RATING_MESSAGE)
        raw = int(raw)

    if raw not in STAR_VALUES:
        raise RatingValidationError(INVALID_RATING_MESSAGE)

    return raw


class RatingService:
    """
    Rating operations for one request.

    Usage:
        service = RatingService(RatingTransactionCoordinator(db))
        result = service.add_rating(account.id, book_id, body.rating)
    """

    def __init__(self, coordinator: RatingTransactionCoordinator) -> None:
        self.coordinator = coordinator

    def add_rating(self, account_id: int, book_id: int, rating: Any) -> RatingResponse:
        value = validate_rating(rating)
        book = self.coordinator.add(account_id, book_id, value)
        return RatingResponse(message="Rating added.", data=BookView.from_book(book))

    def update_rating(self, account_id: int, book_id: int, rating: Any) -> RatingResponse:
        value = validate_rating(rating)
        book = self.coordinator.update(account_id, book_id, value)
        return RatingResponse(message="Rating updated.", data=BookView.from_book(book))

    def remove_rating(self, account_id: int, book_id: int) -> RatingResponse:
        book = self.coordinator.remove(account_id, book_id)
        return RatingResponse(message="Rating removed.", data=BookView.from_book(book))

    def get_user_rating(self, account_id: int, book_id: int) -> UserRatingResponse:
        """
        Read the caller's own rating of a book.

        Raises:
            NoPriorRating: If the account has not rated the book
        """
        value = self.coordinator.store.get_user_rating(account_id, book_id)
        if value is None:
            raise NoPriorRating(account_id, book_id)
        return UserRatingResponse(
            message=f"User rated book ({book_id}) with {value} stars.",
            data=UserRating(book_id=book_id, rating=value),
        )
