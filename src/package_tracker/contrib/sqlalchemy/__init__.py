"""Async SQLAlchemy storage for packages and recipients."""
