"""
oishine_backoffice.realtime

Realtime status fan-out.

Responsibilities:
- Topic naming for orders, drivers and the admin feed.
- In-process publish/subscribe broadcaster with per-connection ordered delivery.
"""

# Package marker.
