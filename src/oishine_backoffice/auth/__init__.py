"""
oishine_backoffice.auth

Admin authentication/authorization package.

Responsibilities:
- JWT and bcrypt helpers.
- Credential verification (`AdminVerifier`) shared by HTTP and WebSocket entrypoints.
- FastAPI auth dependencies (AdminPrincipal + role checks).
"""

# Package marker.
