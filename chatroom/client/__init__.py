"""
Polling client for the chat API
"""
from .api_client import ChatClient
from .feed import MessageFeed
from .poller import poll_loop, sync_feed

__all__ = ["ChatClient", "MessageFeed", "poll_loop", "sync_feed"]
