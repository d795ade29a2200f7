"""
API Routers Package

Router Structure:
- books.py: /api/v1/books/* lookup and administration endpoints
- ratings.py: /api/v1/books/{book_id}/rating endpoints

Each router is imported and registered in main.py.
"""

from catalog.routers.books import router as books_router
from catalog.routers.ratings import router as ratings_router

__all__ = [
    "books_router",
    "ratings_router",
]
