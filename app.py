"""
ASGI entry point - `uvicorn app:app`.

The application lives in healthlog/main.py:
- healthlog/models/ - Pydantic request models
- healthlog/routes/ - API endpoints, one module per tracker
- healthlog/services/ - auth, OAuth, cycle prediction, finance and ShowAPI logic
- healthlog/database/ - MySQL connection, query helpers and schema.sql
- healthlog/utils/ - validation, error and URL helpers
"""

from healthlog.main import app

__all__ = ['app']
