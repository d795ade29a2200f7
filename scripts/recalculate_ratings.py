#!/usr/bin/env python3
"""
Rating Aggregate Rebuild Script

Recomputes every book's aggregate rating block (count, average,
histogram) from its rating rows.

The API updates averages incrementally, so they slowly accumulate
floating-point drift; run this occasionally, or after loading ratings
in bulk outside the API.

USAGE:
    python scripts/recalculate_ratings.py
    python scripts/recalculate_ratings.py --book-id 42
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select

from catalog.database import SessionLocal
from catalog.models import Book
from catalog.services.rating_coordinator import RatingTransactionCoordinator

logger = logging.getLogger(__name__)


def recalculate(book_ids: list[int] | None = None) -> int:
    """
    Rebuild the aggregate block of the given books (all books by default).

    Each book is rebuilt in its own transaction under its row lock.

    Returns:
        Number of books rebuilt
    """
    db = SessionLocal()
    try:
        if book_ids is None:
            book_ids = list(db.execute(select(Book.id).order_by(Book.id)).scalars())
            db.commit()

        coordinator = RatingTransactionCoordinator(db)
        for book_id in book_ids:
            coordinator.rebuild(book_id)

        return len(book_ids)
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Rebuild book rating aggregates")
    parser.add_argument(
        "--book-id",
        type=int,
        action="append",
        dest="book_ids",
        help="Only rebuild this book (repeatable)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    count = recalculate(args.book_ids)
    logger.info(f"Rebuilt rating aggregates of {count} book(s)")


if __name__ == "__main__":
    main()
