"""
Services Package

Business logic kept apart from HTTP handling:

- aggregates.py: O(1) arithmetic for a book's aggregate rating block
- rating_store.py: row-level access to ratings and the aggregate block
- rating_coordinator.py: one transaction per rating mutation
- rating_service.py: input validation and response formatting for routers
- security.py: JWT access-token verification
- rate_limiter.py: request rate limiting with slowapi
"""
