"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from app.api.v1.endpoints import (
    stations,
    places,
    reviews,
    events,
    uploads,
    health
)

api_router = APIRouter()

# Include all routers
api_router.include_router(stations.router, prefix="/stations", tags=["stations"])
api_router.include_router(places.router, prefix="/places", tags=["places"])
api_router.include_router(reviews.router, tags=["reviews"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(uploads.router, tags=["uploads"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
