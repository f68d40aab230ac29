"""
End-to-end tests for the /chat websocket and presence endpoints.
"""

import contextlib

import pytest
from fastapi.testclient import TestClient

from chatrelay.main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True}


def test_users_empty(client):
    assert client.get("/api/users").json() == {"users": [], "count": 0}


def test_chat_scenario(client):
    with client.websocket_connect("/chat") as a:
        assert a.receive_json() == {"type": "system", "content": "Welcome to the chat, User1!"}
        assert a.receive_json() == {"type": "userlist", "users": ["User1"]}

        with client.websocket_connect("/chat") as b:
            assert b.receive_json() == {"type": "system", "content": "Welcome to the chat, User2!"}
            assert b.receive_json() == {"type": "userlist", "users": ["User1", "User2"]}
            assert a.receive_json() == {"type": "system", "content": "User2 joined the chat"}
            assert a.receive_json() == {"type": "userlist", "users": ["User1", "User2"]}

            assert client.get("/api/users").json() == {"users": ["User1", "User2"], "count": 2}

            a.send_json({"type": "ping"})
            a.send_text("not json")
            a.send_json({"type": "chat", "content": "hi"})
            chat = b.receive_json()
            assert chat["type"] == "chat"
            assert chat["sender"] == "User1"
            assert chat["content"] == "hi"
            assert isinstance(chat["timestamp"], int)

            a.close()
            assert b.receive_json() == {"type": "system", "content": "User1 left the chat"}
            assert b.receive_json() == {"type": "userlist", "users": ["User2"]}

            assert client.get("/api/users").json() == {"users": ["User2"], "count": 1}


def test_names_not_reused_after_leave(client):
    with client.websocket_connect("/chat") as a:
        assert a.receive_json()["content"] == "Welcome to the chat, User1!"
    with client.websocket_connect("/chat") as b:
        assert b.receive_json()["content"] == "Welcome to the chat, User2!"
        assert b.receive_json() == {"type": "userlist", "users": ["User2"]}


def test_each_app_has_its_own_relay():
    with TestClient(create_app()) as first:
        with first.websocket_connect("/chat") as ws:
            assert ws.receive_json()["content"] == "Welcome to the chat, User1!"
    with TestClient(create_app()) as second:
        with second.websocket_connect("/chat") as ws:
            assert ws.receive_json()["content"] == "Welcome to the chat, User1!"


def _join_two(client, stack):
    a = stack.enter_context(client.websocket_connect("/chat"))
    a.receive_json()
    a.receive_json()
    b = stack.enter_context(client.websocket_connect("/chat"))
    b.receive_json()
    b.receive_json()
    a.receive_json()
    a.receive_json()
    return a, b


def test_deeply_nested_payload_keeps_sender_connected(client):
    with contextlib.ExitStack() as stack:
        a, b = _join_two(client, stack)

        a.send_text("[" * 100000)
        a.send_json({"type": "chat", "content": "still here"})

        chat = b.receive_json()
        assert (chat["type"], chat["sender"], chat["content"]) == ("chat", "User1", "still here")
        assert client.get("/api/users").json()["count"] == 2


def test_binary_frame_closes_sender_and_notifies_once(client):
    with contextlib.ExitStack() as stack:
        a, b = _join_two(client, stack)

        a.send_bytes(b"\x00")

        assert b.receive_json() == {"type": "system", "content": "User1 left the chat"}
        assert b.receive_json() == {"type": "userlist", "users": ["User2"]}
        assert client.get("/api/users").json() == {"users": ["User2"], "count": 1}
