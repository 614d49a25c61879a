"""
oishine_backoffice.realtime.topics

Topic naming convention. The broadcaster itself attaches no meaning to names.
"""

from __future__ import annotations

ADMIN_TOPIC = "admin"

MAX_TOPIC_LENGTH = 128
MAX_TOPICS_PER_CONNECTION = 64


def order_topic(order_id: str) -> str:
    return f"order:{order_id}"


def driver_topic(driver_id: str) -> str:
    return f"driver:{driver_id}"


def is_valid_topic(name: object) -> bool:
    return isinstance(name, str) and 0 < len(name) <= MAX_TOPIC_LENGTH and name == name.strip()
