"""
Terminal chat client

    python -m chatroom.client --username alice

Lines typed on stdin are sent to the room; new messages are printed as
they arrive. EOF or Ctrl-C logs out.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from chatroom.client.api_client import ChatClient
from chatroom.client.feed import MessageFeed
from chatroom.client.poller import poll_loop
from chatroom.core.config import get_settings
from chatroom.core.exceptions import ChatError
from chatroom.schemas import Message, MessageType, OnlineUsersResponse

logger = logging.getLogger(__name__)


def format_message(message: Message) -> str:
    stamp = message.timestamp.astimezone().strftime("%H:%M:%S")
    if message.type == MessageType.MESSAGE:
        return f"[{stamp}] {message.sender_username}: {message.content}"
    return f"[{stamp}] * {message.content}"


async def run(url: str, username: str, password: str) -> int:
    settings = get_settings()
    feed = MessageFeed()
    stop = asyncio.Event()
    online_count: List[Optional[int]] = [None]

    async def show_messages(messages: List[Message]):
        for message in messages:
            print(format_message(message), flush=True)

    async def show_presence(presence: OnlineUsersResponse):
        if presence.count != online_count[0]:
            online_count[0] = presence.count
            print(f"-- {presence.count} users online --", flush=True)

    async with ChatClient(url, api_prefix=settings.API_PREFIX) as client:
        try:
            user = await client.login(username, password)
        except ChatError as e:
            print(f"Login failed: {e.message}", file=sys.stderr)
            return 1

        poller = asyncio.create_task(poll_loop(
            client,
            feed,
            show_messages,
            show_presence,
            message_interval=settings.CLIENT_MESSAGE_POLL_INTERVAL,
            presence_interval=settings.CLIENT_PRESENCE_POLL_INTERVAL,
            stop=stop,
        ))

        loop = asyncio.get_running_loop()
        try:
            while True:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line:
                    break
                content = line.strip()
                if not content:
                    continue
                try:
                    await client.send_message(user, content)
                except ChatError as e:
                    print(f"Send failed: {e.message}", file=sys.stderr)
        finally:
            stop.set()
            await poller
            await client.logout(user)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Polling chat room client")
    parser.add_argument("--url", default="http://localhost:8000", help="Server base URL")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", default="456")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        return asyncio.run(run(args.url, args.username, args.password))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
