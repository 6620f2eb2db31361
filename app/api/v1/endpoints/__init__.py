"""
API endpoints module
"""

from . import stations, places, reviews, events, uploads, health, websocket

__all__ = [
    "stations",
    "places",
    "reviews",
    "events",
    "uploads",
    "health",
    "websocket"
]
