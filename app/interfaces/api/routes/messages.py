"""Endpoints and websocket handler for event and direct conversations."""

from __future__ import annotations

import asyncio
import logging

import anyio
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from app.application.use_cases.messaging import (
    ensure_participant,
    get_dm_thread,
    list_dm_threads,
    list_event_threads,
    list_messages,
    mark_thread_read,
    resolve_dm_thread,
    send_message,
    unread_count,
)
from app.domain.entities import AnyMessage, DirectMessage, Message, ThreadKey
from app.domain.exceptions import (
    MessagingError,
    ReadMarkerWriteFailure,
    ThreadCreationConflict,
)
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import live_update_hub, serialize_message
from app.interfaces.api.dependencies import get_current_user_id, resolve_current_user_id
from app.interfaces.api.routes_helpers import to_http_exception
from app.interfaces.api.schemas import (
    DMResolveRequest,
    DMThreadRead,
    DMThreadSummaryRead,
    DirectMessageRead,
    EventThreadSummaryRead,
    MessageCreate,
    MessageRead,
    ReadReceiptRead,
    ThreadListRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


def _event_message_to_schema(message: Message) -> MessageRead:
    return MessageRead(
        id=message.id,
        event_id=message.event_id,
        sender_id=message.sender_id,
        body=message.body,
        created_at=message.created_at,
    )


def _direct_message_to_schema(message: DirectMessage) -> DirectMessageRead:
    return DirectMessageRead(
        id=message.id,
        thread_id=message.thread_id,
        sender_id=message.sender_id,
        body=message.body,
        created_at=message.created_at,
    )


def _mark_read(db: Session, thread_key: ThreadKey, user_id: str) -> ReadReceiptRead:
    try:
        marked = mark_thread_read(db, thread_key, user_id)
    except ReadMarkerWriteFailure as exc:
        # The thread stays unread for now; the next open retries.
        logger.warning("Read markers for %s not stored: %s", thread_key, exc)
        marked = 0
    except MessagingError as exc:
        raise to_http_exception(exc) from exc

    try:
        remaining = unread_count(db, thread_key, user_id)
    except MessagingError:
        remaining = None
    return ReadReceiptRead(marked=marked, unread_count=remaining)


@router.get("/threads", response_model=ThreadListRead)
def list_threads(
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> ThreadListRead:
    """Return the event and direct conversations of the authenticated user."""

    try:
        events = list_event_threads(db, current_user_id)
        direct = list_dm_threads(db, current_user_id)
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return ThreadListRead(
        events=[EventThreadSummaryRead.model_validate(summary) for summary in events],
        direct=[DMThreadSummaryRead.model_validate(summary) for summary in direct],
    )


@router.get("/events/{event_id}", response_model=list[MessageRead])
def read_event_messages(
    event_id: int,
    since_id: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> list[MessageRead]:
    try:
        messages = list_messages(
            db, ThreadKey.event(event_id), user_id=current_user_id, since_id=since_id
        )
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return [_event_message_to_schema(message) for message in messages]


@router.post(
    "/events/{event_id}",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
)
def post_event_message(
    event_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> MessageRead:
    """Append a message to the chat of an Out."""

    try:
        message = send_message(
            db, ThreadKey.event(event_id), sender_id=current_user_id, body=payload.body
        )
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return _event_message_to_schema(message)


@router.post("/events/{event_id}/read", response_model=ReadReceiptRead)
def mark_event_thread_read(
    event_id: int,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> ReadReceiptRead:
    return _mark_read(db, ThreadKey.event(event_id), current_user_id)


@router.post("/dm/resolve", response_model=DMThreadRead)
def resolve_direct_thread(
    payload: DMResolveRequest,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> DMThreadRead:
    """Return the conversation with ``other_user_id``, creating it on first contact."""

    try:
        try:
            thread = resolve_dm_thread(db, current_user_id, payload.other_user_id)
        except ThreadCreationConflict:
            logger.info("Retrying DM resolution for %s", current_user_id)
            thread = resolve_dm_thread(db, current_user_id, payload.other_user_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Não é possível conversar consigo mesmo",
        ) from exc
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return DMThreadRead.model_validate(thread)


@router.get("/dm/{thread_id}", response_model=list[DirectMessageRead])
def read_direct_messages(
    thread_id: int,
    since_id: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> list[DirectMessageRead]:
    try:
        messages = list_messages(
            db, ThreadKey.dm(thread_id), user_id=current_user_id, since_id=since_id
        )
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return [_direct_message_to_schema(message) for message in messages]


@router.post(
    "/dm/{thread_id}",
    response_model=DirectMessageRead,
    status_code=status.HTTP_201_CREATED,
)
def post_direct_message(
    thread_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> DirectMessageRead:
    try:
        get_dm_thread(db, thread_id, user_id=current_user_id)
        message = send_message(
            db, ThreadKey.dm(thread_id), sender_id=current_user_id, body=payload.body
        )
    except MessagingError as exc:
        raise to_http_exception(exc) from exc
    return _direct_message_to_schema(message)


@router.post("/dm/{thread_id}/read", response_model=ReadReceiptRead)
def mark_direct_thread_read(
    thread_id: int,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> ReadReceiptRead:
    return _mark_read(db, ThreadKey.dm(thread_id), current_user_id)


def _thread_key_from_query(websocket: WebSocket) -> ThreadKey | None:
    event_id = websocket.query_params.get("event_id")
    dm_thread_id = websocket.query_params.get("dm_thread_id")
    try:
        if event_id and not dm_thread_id:
            return ThreadKey.event(int(event_id))
        if dm_thread_id and not event_id:
            return ThreadKey.dm(int(dm_thread_id))
    except ValueError:
        return None
    return None


def _check_access(thread_key: ThreadKey, user_id: str) -> None:
    with SessionLocal() as session:
        ensure_participant(session, thread_key, user_id)


async def _forward_inserts(websocket: WebSocket, queue: asyncio.Queue[AnyMessage]) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json({"type": "message", "data": serialize_message(message)})


async def _answer_pings(websocket: WebSocket) -> None:
    while True:
        try:
            message = await websocket.receive_json()
        except WebSocketDisconnect:
            return
        except ValueError:
            continue
        if isinstance(message, dict) and message.get("type") == "ping":
            await websocket.send_json({"type": "pong"})


@router.websocket("/ws")
async def messages_websocket(websocket: WebSocket) -> None:
    """Stream the messages appended to one thread while the socket is open."""

    token = websocket.query_params.get("token")
    thread_key = _thread_key_from_query(websocket)
    if not token or thread_key is None:
        await websocket.close(code=1008)
        return

    try:
        user_id = resolve_current_user_id(token)
        await anyio.to_thread.run_sync(_check_access, thread_key, user_id)
    except (HTTPException, MessagingError):
        await websocket.close(code=1008)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[AnyMessage] = asyncio.Queue()

    def _enqueue(message: AnyMessage) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, message)

    unsubscribe = live_update_hub.subscribe(thread_key, _enqueue)
    try:
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward_inserts, websocket, queue)
            await _answer_pings(websocket)
            task_group.cancel_scope.cancel()
    finally:
        unsubscribe()
