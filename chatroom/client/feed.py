"""
Duplicate-free local view of the room
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set

from chatroom.schemas import Message

# Incremental polls re-request this much history before the cursor so that
# messages sharing the cursor's timestamp are not skipped.
CURSOR_OVERLAP = timedelta(microseconds=1)


class MessageFeed:
    """
    Ordered message list merged from successive polls.

    Messages are deduplicated by id and kept in (timestamp, arrival) order.
    """

    def __init__(self):
        self._messages: List[Message] = []
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def latest_timestamp(self) -> Optional[datetime]:
        return self._messages[-1].timestamp if self._messages else None

    def poll_cursor(self) -> Optional[datetime]:
        """Value for the `after` parameter of the next incremental poll"""
        latest = self.latest_timestamp
        if latest is None:
            return None
        return latest - CURSOR_OVERLAP

    def merge(self, batch: Iterable[Message]) -> List[Message]:
        """
        Add a fetched batch

        Returns:
            The messages that were not already in the feed, in order
        """
        added = []
        for message in batch:
            if message.id in self._seen:
                continue
            self._seen.add(message.id)
            added.append(message)

        if not added:
            return added

        needs_sort = self._messages and added[0].timestamp < self._messages[-1].timestamp
        self._messages.extend(added)
        if needs_sort or any(a.timestamp > b.timestamp for a, b in zip(added, added[1:])):
            # stable sort keeps arrival order for equal timestamps
            self._messages.sort(key=lambda m: m.timestamp)
            added.sort(key=lambda m: m.timestamp)
        return added
