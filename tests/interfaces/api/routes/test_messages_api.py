"""Integration tests for the conversation endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from starlette.websockets import WebSocketDisconnect

from app.domain.entities import APPLICATION_STATUS_ACCEPTED, APPLICATION_STATUS_PENDING
from app.domain.exceptions import StoreUnavailable
from app.infrastructure.repositories import DMThreadRepository, ReadMarkerRepository
from app.infrastructure.security import create_access_token
from main import create_app


@pytest.fixture()
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    assert client.get("/messages/threads").status_code == 401
    response = client.get("/messages/threads", headers={"Authorization": "Bearer invalid"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Credenciais inválidas"


def test_event_chat_flow(client: TestClient, seed) -> None:
    event_id = seed.event("org", "Praia", applicants={"ana": APPLICATION_STATUS_ACCEPTED})

    created = client.post(
        f"/messages/events/{event_id}", json={"body": "  levo o cooler  "}, headers=_auth("ana")
    )
    assert created.status_code == 201
    first = created.json()
    assert first["body"] == "levo o cooler"
    assert first["sender_id"] == "ana"

    second = client.post(
        f"/messages/events/{event_id}", json={"body": "combinado"}, headers=_auth("org")
    ).json()

    listed = client.get(f"/messages/events/{event_id}", headers=_auth("ana"))
    assert [message["id"] for message in listed.json()] == [first["id"], second["id"]]
    newer = client.get(
        f"/messages/events/{event_id}", params={"since_id": first["id"]}, headers=_auth("ana")
    )
    assert [message["id"] for message in newer.json()] == [second["id"]]

    threads = client.get("/messages/threads", headers=_auth("ana")).json()
    assert threads["events"][0]["event_id"] == event_id
    assert threads["events"][0]["unread_count"] == 1
    assert threads["events"][0]["last_message_body"] == "combinado"

    receipt = client.post(f"/messages/events/{event_id}/read", headers=_auth("ana"))
    assert receipt.json() == {"marked": 1, "unread_count": 0}
    repeated = client.post(f"/messages/events/{event_id}/read", headers=_auth("ana"))
    assert repeated.json() == {"marked": 0, "unread_count": 0}


def test_event_chat_errors(client: TestClient, seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})

    empty = client.post(f"/messages/events/{event_id}", json={"body": "   "}, headers=_auth("ana"))
    assert empty.status_code == 422
    assert empty.json()["detail"] == "A mensagem não pode estar vazia"

    outsider = client.get(f"/messages/events/{event_id}", headers=_auth("intruso"))
    assert outsider.status_code == 403

    missing = client.get(f"/messages/events/{event_id + 99}", headers=_auth("ana"))
    assert missing.status_code == 404


def test_store_failure_maps_to_service_unavailable(
    client: TestClient, seed, monkeypatch
) -> None:
    event_id = seed.event("org")

    def offline(*args, **kwargs):
        raise StoreUnavailable("store offline")

    monkeypatch.setattr("app.interfaces.api.routes.messages.send_message", offline)
    response = client.post(f"/messages/events/{event_id}", json={"body": "oi"}, headers=_auth("org"))

    assert response.status_code == 503
    assert response.json()["detail"] == "Falha ao enviar, tente novamente"


def test_direct_message_flow(client: TestClient, seed) -> None:
    seed.profile("ana", "Ana")
    resolved = client.post("/messages/dm/resolve", json={"other_user_id": "ana"}, headers=_auth("bruna"))
    assert resolved.status_code == 200
    thread = resolved.json()
    assert (thread["user_a"], thread["user_b"]) == ("ana", "bruna")

    again = client.post("/messages/dm/resolve", json={"other_user_id": "bruna"}, headers=_auth("ana"))
    assert again.json()["id"] == thread["id"]

    posted = client.post(f"/messages/dm/{thread['id']}", json={"body": "oi, Ana"}, headers=_auth("bruna"))
    assert posted.status_code == 201
    assert posted.json()["thread_id"] == thread["id"]

    messages = client.get(f"/messages/dm/{thread['id']}", headers=_auth("ana")).json()
    assert [message["body"] for message in messages] == ["oi, Ana"]

    listing = client.get("/messages/threads", headers=_auth("bruna")).json()
    assert listing["direct"][0]["other_user_id"] == "ana"
    assert listing["direct"][0]["other_display_name"] == "Ana"
    assert listing["direct"][0]["unread_count"] == 0

    assert client.get(f"/messages/dm/{thread['id']}", headers=_auth("carla")).status_code == 403
    receipt = client.post(f"/messages/dm/{thread['id']}/read", headers=_auth("ana")).json()
    assert receipt == {"marked": 1, "unread_count": 0}


def test_cannot_open_conversation_with_self(client: TestClient) -> None:
    response = client.post("/messages/dm/resolve", json={"other_user_id": "ana"}, headers=_auth("ana"))
    assert response.status_code == 400


def test_thread_websocket_streams_new_messages(client: TestClient, seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    token = create_access_token("ana")

    with client.websocket_connect(f"/messages/ws?token={token}&event_id={event_id}") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        client.post(f"/messages/events/{event_id}", json={"body": "ao vivo"}, headers=_auth("org"))
        pushed = websocket.receive_json()

    assert pushed["type"] == "message"
    assert pushed["data"]["body"] == "ao vivo"
    assert pushed["data"]["event_id"] == event_id


def test_thread_websocket_rejects_outsiders(client: TestClient, seed) -> None:
    event_id = seed.event("org")
    token = create_access_token("intruso")

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/messages/ws?token={token}&event_id={event_id}"):
            pass
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/messages/ws?event_id={event_id}"):
            pass


def test_read_marker_failure_is_reported_as_nothing_marked(
    client: TestClient, seed, monkeypatch
) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    client.post(f"/messages/events/{event_id}", json={"body": "oi"}, headers=_auth("org"))

    def broken_insert(self, message_ids, user_id, *, read_at=None):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ReadMarkerRepository, "insert_missing", broken_insert)
    response = client.post(f"/messages/events/{event_id}/read", headers=_auth("ana"))

    assert response.status_code == 200
    assert response.json() == {"marked": 0, "unread_count": 1}


def test_resolve_retries_once_before_answering_conflict(
    client: TestClient, monkeypatch
) -> None:
    attempts = {"count": 0}

    def broken_create(self, user_a, user_b):
        attempts["count"] += 1
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(DMThreadRepository, "create", broken_create)
    response = client.post(
        "/messages/dm/resolve", json={"other_user_id": "bruna"}, headers=_auth("ana")
    )

    assert response.status_code == 409
    assert attempts["count"] == 2
