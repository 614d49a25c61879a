"""
oishine_backoffice.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Publish status events after the corresponding change is committed.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take a session (and a broadcaster where needed) so tests can drive
# them without the HTTP layer.
