"""
Notification Routes

GET /notifications               - Own notifications, newest first
GET /notifications/unread-count  - Number of unread notifications
PUT /notifications/read-all      - Mark all as read
PUT /notifications/{id}/read     - Mark one as read
WS  /ws/notifications?token=     - Realtime push (mounted outside /api)
"""

import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from wostup.core.auth import get_current_user, user_from_token
from wostup.core.errors import AppException
from wostup.core.realtime import manager
from wostup.schemas.schemas import ApiResponse, MessageResponse
from wostup.services.mongo_service import serialize_docs
from wostup.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])
ws_router = APIRouter()


@router.get("", response_model=ApiResponse[list])
async def list_notifications(
    unread: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    user: dict = Depends(get_current_user)
):
    notifications = serialize_docs(
        NotificationService().list_for_user(user["user_id"], unread_only=unread, limit=limit)
    )
    return ApiResponse(data=notifications, count=len(notifications))


@router.get("/unread-count", response_model=ApiResponse[dict])
async def unread_count(user: dict = Depends(get_current_user)):
    return ApiResponse(data={"count": NotificationService().unread_count(user["user_id"])})


@router.put("/read-all", response_model=ApiResponse[dict])
async def mark_all_read(user: dict = Depends(get_current_user)):
    updated = NotificationService().mark_all_read(user["user_id"])
    return ApiResponse(data={"updated": updated})


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(notification_id: str, user: dict = Depends(get_current_user)):
    NotificationService().mark_read(notification_id, user["user_id"])
    return MessageResponse(message="Notification marked as read")


@ws_router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = Query("")):
    """
    Push channel for the logged-in user. The JWT travels as a query
    parameter because browsers cannot set headers on WebSocket requests.
    """
    try:
        user = user_from_token(token)
    except AppException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = user["user_id"]
    await manager.connect(user_id, websocket)
    logger.debug("Notification socket opened for %s", user_id)
    try:
        while True:
            # Client messages are ignored; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(user_id, websocket)
