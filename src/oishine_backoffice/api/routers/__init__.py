"""
oishine_backoffice.api.routers

HTTP and WebSocket routers.
"""
