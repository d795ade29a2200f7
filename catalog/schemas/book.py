"""
Book Pydantic Schemas

BookView is how clients see a book: bibliographic fields plus the
aggregate rating block, regrouped under ``ratings`` and ``icons`` so raw
storage column names (rating_4_star, image_small_url, ...) never leak.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.models import Book

ISBN13_PATTERN = re.compile(r"^\d{13}$")


def is_valid_isbn13(candidate: str) -> bool:
    """True when candidate is exactly 13 digits."""
    return bool(ISBN13_PATTERN.match(candidate))


# =============================================================================
# Response Schemas
# =============================================================================


class RatingsView(BaseModel):
    """Aggregate rating block of a book."""

    average: float = Field(..., ge=0, le=5, description="Mean star rating, 0 when unrated")
    count: int = Field(..., ge=0, description="Number of ratings")
    rating_1: int = Field(..., ge=0, description="Number of 1-star ratings")
    rating_2: int = Field(..., ge=0, description="Number of 2-star ratings")
    rating_3: int = Field(..., ge=0, description="Number of 3-star ratings")
    rating_4: int = Field(..., ge=0, description="Number of 4-star ratings")
    rating_5: int = Field(..., ge=0, description="Number of 5-star ratings")


class IconsView(BaseModel):
    """Cover image URLs."""

    large: str | None = Field(default=None, description="Large cover image URL")
    small: str | None = Field(default=None, description="Small cover image URL")


class BookView(BaseModel):
    """
    A book as returned to API clients.

    Built from a Book row with BookView.from_book().
    """

    isbn13: str = Field(..., description="13-digit ISBN")
    authors: str = Field(..., description="Comma-separated author names")
    publication: int | None = Field(default=None, description="Publication year")
    original_title: str | None = Field(default=None, description="Original title")
    title: str = Field(..., description="Title")
    ratings: RatingsView
    icons: IconsView

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "isbn13": "9780439023480",
                "authors": "Suzanne Collins",
                "publication": 2008,
                "original_title": "The Hunger Games",
                "title": "The Hunger Games (The Hunger Games, #1)",
                "ratings": {
                    "average": 4.34,
                    "count": 4780653,
                    "rating_1": 66715,
                    "rating_2": 127936,
                    "rating_3": 560092,
                    "rating_4": 1481305,
                    "rating_5": 2706317,
                },
                "icons": {
                    "large": "https://images.gr-assets.com/books/1447303603m/2767052.jpg",
                    "small": "https://images.gr-assets.com/books/1447303603s/2767052.jpg",
                },
            }
        },
    )

    @classmethod
    def from_book(cls, book: Book) -> "BookView":
        return cls(
            isbn13=book.isbn13,
            authors=book.authors,
            publication=book.publication_year,
            original_title=book.original_title,
            title=book.title,
            ratings=RatingsView(
                average=book.rating_avg,
                count=book.rating_count,
                rating_1=book.rating_1_star,
                rating_2=book.rating_2_star,
                rating_3=book.rating_3_star,
                rating_4=book.rating_4_star,
                rating_5=book.rating_5_star,
            ),
            icons=IconsView(large=book.image_url, small=book.image_small_url),
        )


class BookResponse(BaseModel):
    """Envelope for endpoints returning a single book."""

    message: str
    data: BookView


class BookListResponse(BaseModel):
    """Envelope for paginated book listings."""

    message: str
    data: list[BookView]
    total: int = Field(..., ge=0, description="Total number of matching books")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")


# =============================================================================
# Request Schemas
# =============================================================================


class BookCreate(BaseModel):
    """
    Schema for creating a book. New books start with an empty
    aggregate rating block.
    """

    isbn13: str = Field(..., description="13-digit ISBN", examples=["9780439023480"])
    authors: str = Field(..., min_length=1, max_length=2000)
    publication_year: int | None = Field(default=None, ge=0, le=9999)
    original_title: str | None = Field(default=None, max_length=2000)
    title: str = Field(..., min_length=1, max_length=2000)
    image_url: str | None = Field(default=None)
    image_small_url: str | None = Field(default=None)

    @field_validator("isbn13")
    @classmethod
    def validate_isbn13(cls, v: str) -> str:
        """Accept hyphens and spaces, store the bare 13 digits."""
        cleaned = re.sub(r"[-\s]", "", v)
        if not is_valid_isbn13(cleaned):
            raise ValueError("Invalid ISBN-13 format. Must be exactly 13 digits")
        return cleaned

    @field_validator("title", "authors")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()
