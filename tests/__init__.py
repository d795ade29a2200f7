"""
Test Suite for the Book Catalog API

Test Organization:
- conftest.py: Shared fixtures (test database, client, sample data)
- test_aggregates.py: Aggregate block arithmetic
- test_rating_store.py: Row-level rating persistence
- test_rating_coordinator.py: Transactional rating mutations
- test_rating_service.py: Input validation and result formatting
- test_ratings_api.py: /api/v1/books/{book_id}/rating endpoints
- test_books_api.py: /api/v1/books endpoints
- test_security.py: Access tokens and settings validation
- test_concurrency.py: Row-lock serialization (PostgreSQL only)

Running Tests:
    pytest
    pytest tests/test_rating_coordinator.py -v
    TEST_DATABASE_URL=postgresql://... pytest tests/test_concurrency.py
"""
