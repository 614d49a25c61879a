"""
oishine_backoffice.api

API package for the Oishine back-office service.

Responsibilities:
- FastAPI app factory, error handlers and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + auth + delegation to services.
