"""
Polling client against the in-process app
"""
import asyncio

import httpx
import pytest

from chatroom.client import ChatClient, MessageFeed, poll_loop, sync_feed
from chatroom.core.exceptions import (
    ChatError,
    InvalidCredentialsError,
    UsernameTakenError,
    ValidationError,
)
from chatroom.main import create_app
from chatroom.store import MemoryStore


@pytest.mark.asyncio
async def test_login_send_and_fetch(chat_client):
    alice = await chat_client.login("alice", "456")
    assert alice.is_online

    sent = await chat_client.send_message(alice, "hello")
    assert sent.type == "message"
    assert sent.sender_username == "alice"

    messages = await chat_client.fetch_messages()
    assert [m.content for m in messages] == ["alice joined the chat", "hello"]

    assert await chat_client.fetch_messages(after=sent.timestamp) == []


@pytest.mark.asyncio
async def test_error_statuses_map_to_exceptions(chat_client):
    await chat_client.login("alice", "456")

    with pytest.raises(UsernameTakenError):
        await chat_client.login("alice", "456")

    with pytest.raises(InvalidCredentialsError):
        await chat_client.login("bob", "nope")

    with pytest.raises(ValidationError) as exc_info:
        await chat_client.login("", "456")
    assert exc_info.value.field == "username"
    assert exc_info.value.message == "Username is required"


@pytest.mark.asyncio
async def test_server_error_maps_to_chat_error(settings):
    class BrokenStore(MemoryStore):
        def get_messages(self, limit=50):
            raise RuntimeError("boom")

    app = create_app(settings, store=BrokenStore())
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with ChatClient("http://testserver", transport=transport) as client:
        with pytest.raises(ChatError) as exc_info:
            await client.fetch_messages()

    assert exc_info.value.message == "Internal server error"


@pytest.mark.asyncio
async def test_logout_updates_presence(chat_client):
    alice = await chat_client.login("alice", "456")
    await chat_client.login("bob", "456")
    assert (await chat_client.online_users()).count == 2

    await chat_client.logout(alice)

    presence = await chat_client.online_users()
    assert presence.count == 1
    assert [u.username for u in presence.users] == ["bob"]


@pytest.mark.asyncio
async def test_sync_feed_is_duplicate_free(chat_client):
    feed = MessageFeed()
    alice = await chat_client.login("alice", "456")

    first = await sync_feed(chat_client, feed)
    assert [m.content for m in first] == ["alice joined the chat"]

    assert await sync_feed(chat_client, feed) == []

    await chat_client.send_message(alice, "one")
    await chat_client.send_message(alice, "two")

    added = await sync_feed(chat_client, feed)
    assert [m.content for m in added] == ["one", "two"]
    assert [m.content for m in feed.messages] == ["alice joined the chat", "one", "two"]


@pytest.mark.asyncio
async def test_sync_feed_catches_same_timestamp_messages(settings, clock):
    # clock never advances, so every message shares one timestamp
    app = create_app(settings, store=MemoryStore(clock=clock))
    transport = httpx.ASGITransport(app=app)
    async with ChatClient("http://testserver", transport=transport) as client:
        feed = MessageFeed()
        alice = await client.login("alice", "456")
        await sync_feed(client, feed)

        await client.send_message(alice, "same instant")
        added = await sync_feed(client, feed)

    assert [m.content for m in added] == ["same instant"]
    assert len(feed) == 2


@pytest.mark.asyncio
async def test_poll_loop_delivers_until_stopped(chat_client):
    alice = await chat_client.login("alice", "456")
    await chat_client.send_message(alice, "hi")

    feed = MessageFeed()
    stop = asyncio.Event()
    received = []
    presence = []

    async def on_messages(messages):
        received.extend(messages)
        if len(received) >= 2:
            stop.set()

    async def on_presence(snapshot):
        presence.append(snapshot.count)

    await asyncio.wait_for(
        poll_loop(
            chat_client,
            feed,
            on_messages,
            on_presence,
            message_interval=0.01,
            presence_interval=0.01,
            stop=stop,
        ),
        timeout=5,
    )

    assert [m.content for m in received] == ["alice joined the chat", "hi"]
    assert presence and presence[0] == 1


@pytest.mark.asyncio
async def test_poll_loop_survives_malformed_body():
    def handler(request):
        if request.url.path == "/api/messages":
            return httpx.Response(200, json=[{"unexpected": "shape"}])
        return httpx.Response(200, json={"count": 0, "users": []})

    stop = asyncio.Event()
    presence = []
    received = []

    async def on_messages(messages):
        received.extend(messages)

    async def on_presence(snapshot):
        presence.append(snapshot.count)
        if len(presence) >= 3:
            stop.set()

    transport = httpx.MockTransport(handler)
    async with ChatClient("http://testserver", transport=transport) as client:
        await asyncio.wait_for(
            poll_loop(
                client,
                MessageFeed(),
                on_messages,
                on_presence,
                message_interval=0.01,
                presence_interval=0.01,
                stop=stop,
            ),
            timeout=5,
        )

    assert received == []
    assert presence == [0, 0, 0]
