"""
Book Catalog API Application Package

A book catalog with per-account star ratings.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine and session management
- exceptions.py: Client-facing error taxonomy
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Rating aggregation, storage, transactions, security
"""

__version__ = "0.1.0"
