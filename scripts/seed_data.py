#!/usr/bin/env python3
"""
Development Seed Data

Creates an administrator, five readers and a few well-known books, then
has every reader rate every book. Ratings go through the rating
coordinator, so each book's aggregate block agrees with its rows.

USAGE:
    python scripts/seed_data.py           # wipe catalog tables first
    python scripts/seed_data.py --keep    # add to what is already there
"""

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from catalog.database import SessionLocal, create_tables
from catalog.models import Account, Book, Rating
from catalog.services.rating_coordinator import RatingTransactionCoordinator


def wipe(db: Session) -> None:
    # ratings first: they reference both other tables
    for model in (Rating, Book, Account):
        db.execute(delete(model))
    db.commit()
    print("Catalog tables emptied.")


def create_accounts(db: Session) -> list[Account]:
    accounts = [Account(username="admin", email="admin@example.com", is_admin=True)]
    accounts += [
        Account(username=f"reader{i}", email=f"reader{i}@example.com")
        for i in range(1, 6)
    ]
    db.add_all(accounts)
    db.commit()
    for account in accounts:
        db.refresh(account)

    print(f"{len(accounts)} accounts (1 admin).")
    return accounts


def create_books(db: Session) -> list[Book]:
    """Books start unrated; create_ratings fills their blocks."""

    books_data = [
        {
            "isbn13": "9780439023480",
            "authors": "Suzanne Collins",
            "publication_year": 2008,
            "original_title": "The Hunger Games",
            "title": "The Hunger Games (The Hunger Games, #1)",
            "image_url": "https://images.gr-assets.com/books/1447303603m/2767052.jpg",
            "image_small_url": "https://images.gr-assets.com/books/1447303603s/2767052.jpg",
        },
        {
            "isbn13": "9780439554930",
            "authors": "J.K. Rowling, Mary GrandPré",
            "publication_year": 1997,
            "original_title": "Harry Potter and the Philosopher's Stone",
            "title": "Harry Potter and the Sorcerer's Stone (Harry Potter, #1)",
            "image_url": "https://images.gr-assets.com/books/1474154022m/3.jpg",
            "image_small_url": "https://images.gr-assets.com/books/1474154022s/3.jpg",
        },
        {
            "isbn13": "9780316015840",
            "authors": "Stephenie Meyer",
            "publication_year": 2005,
            "original_title": "Twilight",
            "title": "Twilight (Twilight, #1)",
            "image_url": "https://images.gr-assets.com/books/1361039443m/41865.jpg",
            "image_small_url": "https://images.gr-assets.com/books/1361039443s/41865.jpg",
        },
        {
            "isbn13": "9780061120080",
            "authors": "Harper Lee",
            "publication_year": 1960,
            "original_title": "To Kill a Mockingbird",
            "title": "To Kill a Mockingbird",
            "image_url": "https://images.gr-assets.com/books/1361975680m/2657.jpg",
            "image_small_url": "https://images.gr-assets.com/books/1361975680s/2657.jpg",
        },
    ]

    books = [Book(**data) for data in books_data]
    db.add_all(books)
    db.commit()
    for book in books:
        db.refresh(book)

    print(f"{len(books)} books.")
    return books


def create_ratings(db: Session, accounts: list[Account], books: list[Book]) -> int:
    coordinator = RatingTransactionCoordinator(db)
    readers = [account for account in accounts if not account.is_admin]

    created = 0
    for b, book in enumerate(books):
        for r, reader in enumerate(readers):
            coordinator.add(reader.id, book.id, (b + r) % 5 + 1)
            created += 1

    print(f"{created} ratings.")
    return created


def seed(keep_existing: bool = False) -> None:
    create_tables()

    db = SessionLocal()
    try:
        if not keep_existing:
            wipe(db)

        accounts = create_accounts(db)
        books = create_books(db)
        create_ratings(db, accounts, books)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print("Seed complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load development data into the catalog")
    parser.add_argument("--keep", action="store_true", help="Do not empty the tables first")
    seed(keep_existing=parser.parse_args().keep)
