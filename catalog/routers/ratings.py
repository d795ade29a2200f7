"""
Ratings Router

Endpoints for the caller's own rating of a book.

Endpoints:
- GET /books/{book_id}/rating - The caller's current rating
- POST /books/{book_id}/rating - Rate a book (1-5 stars)
- PUT /books/{book_id}/rating - Change an existing rating
- DELETE /books/{book_id}/rating - Withdraw a rating

All endpoints require a Bearer access token. Mutations return the book
with its aggregate rating block as it is after the commit. Failures
(bad rating, unknown book, already rated, ...) are raised by the
rating service and rendered by the CatalogError handler in main.py.
"""

from fastapi import APIRouter, Request, status

from catalog.config import get_settings
from catalog.dependencies import CurrentAccount, Ratings
from catalog.schemas import (
    ErrorResponse,
    RatingRequest,
    RatingResponse,
    UserRatingResponse,
)
from catalog.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Ratings"],
    responses={
        401: {"description": "Missing or invalid access token"},
        404: {"model": ErrorResponse, "description": "Book or rating not found"},
        500: {"model": ErrorResponse, "description": "Transaction failed, nothing was written"},
    },
)


@router.get(
    "/{book_id}/rating",
    response_model=UserRatingResponse,
    summary="Get your rating of a book",
)
@limiter.limit(settings.rate_limit_default)
def get_my_rating(
    request: Request,
    book_id: int,
    current_account: CurrentAccount,
    ratings: Ratings,
) -> UserRatingResponse:
    return ratings.get_user_rating(current_account.id, book_id)


@router.post(
    "/{book_id}/rating",
    response_model=RatingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rate a book",
    description="Add a 1-5 star rating. One rating per account per book.",
    responses={400: {"model": ErrorResponse, "description": "Invalid rating or already rated"}},
)
@limiter.limit(settings.rate_limit_write)
def add_rating(
    request: Request,
    book_id: int,
    current_account: CurrentAccount,
    ratings: Ratings,
    payload: RatingRequest | None = None,
) -> RatingResponse:
    """
    Rate a book.

    Raises (rendered as JSON by the CatalogError handler):
        RatingValidationError: 400 if rating is missing or not 1-5
        AlreadyRated: 400 if the caller already rated this book
        BookNotFound: 404 if the book does not exist
    """
    rating = payload.rating if payload else None
    return ratings.add_rating(current_account.id, book_id, rating)


@router.put(
    "/{book_id}/rating",
    response_model=RatingResponse,
    summary="Change your rating of a book",
    responses={400: {"model": ErrorResponse, "description": "Invalid or unchanged rating"}},
)
@limiter.limit(settings.rate_limit_write)
def update_rating(
    request: Request,
    book_id: int,
    current_account: CurrentAccount,
    ratings: Ratings,
    payload: RatingRequest | None = None,
) -> RatingResponse:
    """
    Change an existing rating.

    Raises (rendered as JSON by the CatalogError handler):
        RatingValidationError: 400 if rating is missing or not 1-5
        NoChange: 400 if the rating equals the current one
        NoPriorRating: 404 if the caller has not rated this book
        BookNotFound: 404 if the book does not exist
    """
    rating = payload.rating if payload else None
    return ratings.update_rating(current_account.id, book_id, rating)


@router.delete(
    "/{book_id}/rating",
    response_model=RatingResponse,
    summary="Withdraw your rating of a book",
)
@limiter.limit(settings.rate_limit_write)
def remove_rating(
    request: Request,
    book_id: int,
    current_account: CurrentAccount,
    ratings: Ratings,
) -> RatingResponse:
    return ratings.remove_rating(current_account.id, book_id)
