"""
Rating Pydantic Schemas

The request body deliberately accepts any JSON value for ``rating``:
presence, type, and range are checked by the rating service so that a
bad rating yields the API's own 400 message instead of a generic 422.
"""

from typing import Any

from pydantic import BaseModel, Field

from catalog.schemas.book import BookView


class RatingRequest(BaseModel):
    """
    Body of add/update rating requests.

    Example request body:
    {
        "rating": 4
    }
    """

    rating: Any = Field(
        default=None,
        description="Integer star rating from 1 to 5",
        examples=[4, 5],
    )


class RatingResponse(BaseModel):
    """Successful rating mutation: the book as it is after the commit."""

    message: str
    data: BookView


class UserRating(BaseModel):
    book_id: int
    rating: int = Field(..., ge=1, le=5)


class UserRatingResponse(BaseModel):
    message: str
    data: UserRating


class ErrorResponse(BaseModel):
    """Body of every rating failure."""

    message: str
    data: dict[str, Any] = Field(default_factory=dict)
