"""
Pydantic Schemas Package

Request/response models, kept separate from the SQLAlchemy models so the
API shape can evolve independently of the table layout.
"""

from catalog.schemas.book import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookView,
    IconsView,
    RatingsView,
)
from catalog.schemas.rating import (
    ErrorResponse,
    RatingRequest,
    RatingResponse,
    UserRating,
    UserRatingResponse,
)

__all__ = [
    # Book schemas
    "BookCreate",
    "BookListResponse",
    "BookResponse",
    "BookView",
    "IconsView",
    "RatingsView",
    # Rating schemas
    "ErrorResponse",
    "RatingRequest",
    "RatingResponse",
    "UserRating",
    "UserRatingResponse",
]
