"""Endpoints and websocket handler for the notification feed."""

from __future__ import annotations

from typing import Any

import anyio
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import advance_watermark, build_notification_feed
from app.domain.entities import NotificationFeed, NotificationItem
from app.domain.exceptions import MessagingError
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import notification_manager
from app.interfaces.api.dependencies import get_current_user_id, resolve_current_user_id
from app.interfaces.api.routes_helpers import to_http_exception
from app.interfaces.api.schemas import (
    NotificationFeedRead,
    NotificationRead,
    NotificationSeenRequest,
    NotificationWatermarkRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(item: NotificationItem) -> NotificationRead:
    return NotificationRead(
        id=item.id,
        kind=item.kind.value,
        title=item.title,
        body=item.body,
        timestamp=item.timestamp,
        link=item.link,
        read=item.read,
    )


def _feed_to_schema(feed: NotificationFeed) -> NotificationFeedRead:
    return NotificationFeedRead(
        items=[_notification_to_schema(item) for item in feed.items],
        unread_count=feed.unread_count,
        badge=feed.badge,
    )


def _feed_to_payload(feed: NotificationFeed) -> dict[str, Any]:
    return _feed_to_schema(feed).model_dump(mode="json")


@router.get("/", response_model=NotificationFeedRead)
def list_notifications(
    full: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> NotificationFeedRead:
    """Return the compact dropdown feed, or the full page with ``full=true``."""

    try:
        feed = build_notification_feed(db, current_user_id, full=full)
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return _feed_to_schema(feed)


@router.post("/seen", response_model=NotificationWatermarkRead)
def mark_notifications_seen(
    payload: NotificationSeenRequest | None = None,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> NotificationWatermarkRead:
    """Silence the badge; messages keep their individual read state."""

    try:
        watermark = advance_watermark(db, current_user_id, payload.at if payload else None)
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return NotificationWatermarkRead.model_validate(watermark)


def _load_compact_feed(user_id: str) -> NotificationFeed:
    with SessionLocal() as session:
        return build_notification_feed(session, user_id)


def _dismiss(user_id: str) -> NotificationFeed:
    with SessionLocal() as session:
        advance_watermark(session, user_id)
        return build_notification_feed(session, user_id)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that pushes new-message hints to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        user_id = resolve_current_user_id(token)
    except HTTPException:
        await websocket.close(code=1008)
        return

    try:
        feed = await anyio.to_thread.run_sync(_load_compact_feed, user_id)
    except MessagingError:
        await websocket.close(code=1011)
        return

    await notification_manager.connect(user_id, websocket)
    try:
        await websocket.send_json({"type": "init", "data": _feed_to_payload(feed)})
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "seen":
                try:
                    feed = await anyio.to_thread.run_sync(_dismiss, user_id)
                except MessagingError:
                    await websocket.send_json({"type": "error", "data": "seen"})
                    continue
                await websocket.send_json({"type": "feed", "data": _feed_to_payload(feed)})
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(user_id, websocket)
