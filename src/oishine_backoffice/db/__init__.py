"""
oishine_backoffice.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for admins, orders and drivers.
"""

# Package marker.
