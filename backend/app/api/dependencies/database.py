# backend/app/api/dependencies/database.py
"""
Database-related dependencies.

Re-exports app.database.get_db unchanged so that
app.dependency_overrides[get_db] in tests covers every route.
"""

from ...database import get_db

__all__ = ["get_db"]
