"""
Polling loops for messages and presence
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from chatroom.client.api_client import ChatClient
from chatroom.client.feed import MessageFeed
from chatroom.core.exceptions import ChatError
from chatroom.schemas import Message, OnlineUsersResponse

logger = logging.getLogger(__name__)

MessagesCallback = Callable[[List[Message]], Awaitable[None]]
PresenceCallback = Callable[[OnlineUsersResponse], Awaitable[None]]


async def sync_feed(client: ChatClient, feed: MessageFeed) -> List[Message]:
    """
    Bring the feed up to date

    First call loads the latest window, later calls fetch incrementally.

    Returns:
        Newly added messages
    """
    cursor = feed.poll_cursor()
    batch = await client.fetch_messages(after=cursor)
    return feed.merge(batch)


async def _every(interval: float, stop: asyncio.Event, tick: Callable[[], Awaitable[None]], name: str):
    while not stop.is_set():
        try:
            await tick()
        except (httpx.HTTPError, ChatError, PydanticValidationError) as e:
            # next tick is the retry
            logger.warning(f"{name} poll failed: {e}")

        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass


async def poll_loop(
    client: ChatClient,
    feed: MessageFeed,
    on_messages: MessagesCallback,
    on_presence: Optional[PresenceCallback] = None,
    message_interval: float = 3.0,
    presence_interval: float = 5.0,
    stop: Optional[asyncio.Event] = None,
):
    """
    Poll messages and presence on fixed intervals until `stop` is set

    `on_messages` only receives messages not seen before.
    """
    stop = stop or asyncio.Event()

    async def messages_tick():
        added = await sync_feed(client, feed)
        if added:
            await on_messages(added)

    async def presence_tick():
        await on_presence(await client.online_users())

    loops = [_every(message_interval, stop, messages_tick, "messages")]
    if on_presence is not None:
        loops.append(_every(presence_interval, stop, presence_tick, "presence"))

    await asyncio.gather(*loops)
