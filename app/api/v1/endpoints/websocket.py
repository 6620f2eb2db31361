"""
WebSocket endpoints for real-time review updates
"""

from fastapi import APIRouter, WebSocket

from app.services.websocket_service import websocket_endpoint

router = APIRouter()


@router.websocket("/ws")
@router.websocket("/socket")
async def review_updates(websocket: WebSocket):
    """
    Every connected client receives every review_updated message and
    filters on placeId itself. Messages are not replayed, so clients
    re-fetch the place list after reconnecting.
    """
    await websocket_endpoint(websocket)
