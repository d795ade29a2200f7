"""
SQLAlchemy Models Package

Model Relationships:
- Account <-> Book: Many-to-Many through Rating (an account rates many
                    books, a book is rated by many accounts)

Import all models here so Alembic discovers them and callers can write
``from catalog.models import Book, Rating``.
"""

from catalog.models.account import Account
from catalog.models.book import Book
from catalog.models.rating import Rating

__all__ = [
    "Account",
    "Book",
    "Rating",
]
