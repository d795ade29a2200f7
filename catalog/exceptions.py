"""
Catalog Errors

Every way a catalog request can fail on domain grounds, each with the
HTTP status and the client-facing message the API returns for it.

Rating mutations:
- RatingValidationError: malformed or missing rating input (caller error)
- BookNotFound, NoPriorRating, AlreadyRated, NoChange: the request
  conflicts with the current state of the book or the caller's rating
- StorageError: the transaction failed; nothing was written, so the
  caller may retry. The message never carries internal detail.

Book lookups and administration:
- InvalidIsbn, DuplicateIsbn (and BookNotFound)

None of these are retried by the service itself.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for failures surfaced to API clients."""

    status_code: int = 400
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def data(self) -> dict[str, Any]:
        """Extra payload returned to the client alongside the message."""
        return {}


class BookNotFound(CatalogError):
    status_code = 404
    default_message = "Book not found."

    def __init__(self, book_id: int | None = None, isbn13: str | None = None) -> None:
        self.book_id = book_id
        self.isbn13 = isbn13
        super().__init__()


class InvalidIsbn(CatalogError):
    status_code = 400
    default_message = "Invalid ISBN format. It should be a 13-digit number."


class DuplicateIsbn(CatalogError):
    status_code = 409
    default_message = "Book with this ISBN already exists"

    def __init__(self, isbn13: str) -> None:
        self.isbn13 = isbn13
        super().__init__()


# =============================================================================
# Rating Errors
# =============================================================================


class RatingError(CatalogError):
    """Base class for rejected rating mutations."""

    default_message = "Rating request could not be processed."


class RatingValidationError(RatingError):
    status_code = 400
    default_message = "Rating must be an integer between [1, 5]"


class NoPriorRating(RatingError):
    status_code = 404
    default_message = "User has not rated this book."

    def __init__(self, account_id: int, book_id: int, message: str | None = None) -> None:
        self.account_id = account_id
        self.book_id = book_id
        super().__init__(message)


class AlreadyRated(RatingError):
    status_code = 400
    default_message = "This user has already rated this book"

    def __init__(self, account_id: int, book_id: int, previous_rating: int) -> None:
        self.account_id = account_id
        self.book_id = book_id
        self.previous_rating = previous_rating
        super().__init__()

    @property
    def data(self) -> dict[str, Any]:
        return {"book_id": self.book_id, "previous_rating": self.previous_rating}


class NoChange(RatingError):
    status_code = 400
    default_message = "New rating is the same as the previous rating."

    def __init__(self, account_id: int, book_id: int, rating: int) -> None:
        self.account_id = account_id
        self.book_id = book_id
        self.rating = rating
        super().__init__()


class StorageError(RatingError):
    status_code = 500
    default_message = "Internal server error - please contact support"
