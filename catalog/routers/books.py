"""
Books Router

Lookup and administration endpoints for catalog books.

Endpoints:
- GET /books/ - Books by minimum rating, author and title
- GET /books/isbn/{isbn13} - Book by 13-digit ISBN
- GET /books/{book_id} - Book by id
- POST /books/ - Create a book (administrators)
- DELETE /books/isbn/{isbn13} - Delete a book and its ratings (administrators)

Every book is returned as a BookView. The aggregate rating block is
read as stored; only the rating coordinator writes it.
"""

import logging
import math

from fastapi import APIRouter, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from catalog.config import get_settings
from catalog.dependencies import AdminAccount, DbSession, Pagination
from catalog.exceptions import BookNotFound, DuplicateIsbn, InvalidIsbn
from catalog.models import Book
from catalog.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookView,
    ErrorResponse,
)
from catalog.schemas.book import is_valid_isbn13
from catalog.services.rate_limiter import limiter

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)


def get_book_by_isbn_or_404(db: DbSession, isbn13: str) -> Book:
    """Validate the ISBN and load its book, or raise."""
    if not is_valid_isbn13(isbn13):
        raise InvalidIsbn()

    stmt = select(Book).where(Book.isbn13 == isbn13)
    book = db.execute(stmt).scalar_one_or_none()
    if book is None:
        raise BookNotFound(isbn13=isbn13)
    return book


# =============================================================================
# Lookups
# =============================================================================


def filter_books(stmt, min_rating: float, authors: str | None, title: str | None):
    """
    Narrow a book query by the listing's query parameters.

    authors and title are case-insensitive substring matches; all given
    filters must hold.
    """
    stmt = stmt.where(Book.rating_avg >= min_rating)
    if authors:
        stmt = stmt.where(func.lower(Book.authors).like(f"%{authors.lower()}%"))
    if title:
        stmt = stmt.where(func.lower(Book.title).like(f"%{title.lower()}%"))
    return stmt


@router.get(
    "/",
    response_model=BookListResponse,
    summary="Search books",
    description=(
        "Books with an average rating of at least min_rating, optionally "
        "narrowed by author and title, best rated first."
    ),
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    min_rating: float = Query(
        default=0,
        ge=0,
        le=5,
        description="Minimum average rating (0-5)",
        examples=[3.5, 4],
    ),
    authors: str | None = Query(
        default=None,
        min_length=1,
        max_length=200,
        description="Part of an author name (case-insensitive)",
        examples=["Collins"],
    ),
    title: str | None = Query(
        default=None,
        min_length=1,
        max_length=200,
        description="Part of the title (case-insensitive)",
        examples=["Mockingbird"],
    ),
) -> BookListResponse:
    count_stmt = filter_books(select(func.count()).select_from(Book), min_rating, authors, title)
    total = db.execute(count_stmt).scalar() or 0

    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        filter_books(select(Book), min_rating, authors, title)
        .order_by(Book.rating_avg.desc(), Book.rating_count.desc(), Book.id)
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    books = db.execute(stmt).scalars().all()

    return BookListResponse(
        message=f"({total}) Book(s) found.",
        data=[BookView.from_book(book) for book in books],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get(
    "/isbn/{isbn13}",
    response_model=BookResponse,
    summary="Get a book by ISBN",
    responses={400: {"model": ErrorResponse, "description": "Invalid ISBN format"}},
)
@limiter.limit(settings.rate_limit_default)
def get_book_by_isbn(
    request: Request,
    isbn13: str,
    db: DbSession,
) -> BookResponse:
    book = get_book_by_isbn_or_404(db, isbn13)
    return BookResponse(
        message=f"Book found with ISBN {isbn13}.",
        data=BookView.from_book(book),
    )


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book by id",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookResponse:
    book = db.get(Book, book_id)
    if book is None:
        raise BookNotFound(book_id)
    return BookResponse(message="Book found.", data=BookView.from_book(book))


# =============================================================================
# Administration
# =============================================================================


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
    description="Add a book to the catalog with an empty rating block. Administrators only.",
    responses={409: {"model": ErrorResponse, "description": "ISBN already exists"}},
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_account: AdminAccount,
) -> BookResponse:
    """
    Create a new book.

    Raises:
        DuplicateIsbn: 409 if a book with this ISBN exists
    """
    existing = db.execute(
        select(Book.id).where(Book.isbn13 == book_data.isbn13)
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateIsbn(book_data.isbn13)

    book = Book(**book_data.model_dump())
    db.add(book)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent create of the same ISBN
        db.rollback()
        raise DuplicateIsbn(book_data.isbn13) from None
    db.refresh(book)

    logger.info(f"Account {current_account.id} created book {book.id} ({book.isbn13})")
    return BookResponse(message="Book created.", data=BookView.from_book(book))


@router.delete(
    "/isbn/{isbn13}",
    response_model=BookResponse,
    summary="Delete a book",
    description="Delete a book together with all of its ratings. Administrators only.",
    responses={400: {"model": ErrorResponse, "description": "Invalid ISBN format"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    isbn13: str,
    db: DbSession,
    current_account: AdminAccount,
) -> BookResponse:
    book = get_book_by_isbn_or_404(db, isbn13)
    deleted = BookView.from_book(book)

    db.delete(book)
    db.commit()

    logger.info(f"Account {current_account.id} deleted book with ISBN {isbn13}")
    return BookResponse(message="Book deleted.", data=deleted)
