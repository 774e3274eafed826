"""
Store contract tests - run against every backend
"""
import pytest
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta

from chatroom.core.exceptions import ConflictError, UsernameTakenError
from chatroom.schemas import UserCreate, MessageCreate, MessageType


def post(store, content, sender_id="u1", sender_username="alice", **kwargs):
    return store.create_message(MessageCreate(
        content=content, sender_id=sender_id, sender_username=sender_username, **kwargs
    ))


class TestUsers:

    def test_get_user_missing(self, store):
        assert store.get_user("nope") is None
        assert store.get_user_by_username("nobody") is None

    def test_create_user_is_online(self, store, clock):
        user = store.create_user(UserCreate(username="alice"))

        assert user.id
        assert user.username == "alice"
        assert user.is_online is True
        assert user.last_seen == clock.now
        assert store.get_user(user.id) == user

    def test_username_lookup_is_exact(self, store):
        user = store.create_user(UserCreate(username="alice"))

        assert store.get_user_by_username("alice").id == user.id
        assert store.get_user_by_username("Alice") is None
        assert store.get_user_by_username("alice ") is None

    def test_duplicate_username_rejected(self, store):
        store.create_user(UserCreate(username="alice"))

        with pytest.raises(UsernameTakenError):
            store.create_user(UserCreate(username="alice"))
        assert store.count_users() == 1

    def test_duplicate_is_a_conflict(self, store):
        store.create_user(UserCreate(username="bob"))
        with pytest.raises(ConflictError):
            store.create_user(UserCreate(username="bob"))

    def test_update_online_status(self, store, clock):
        user = store.create_user(UserCreate(username="alice"))
        clock.advance(seconds=30)

        store.update_user_online_status(user.id, False)

        stored = store.get_user(user.id)
        assert stored.is_online is False
        assert stored.last_seen == clock.now

    def test_update_unknown_user_is_noop(self, store):
        store.update_user_online_status("missing", True)
        assert store.count_users() == 0

    def test_online_users(self, store):
        alice = store.create_user(UserCreate(username="alice"))
        bob = store.create_user(UserCreate(username="bob"))
        store.create_user(UserCreate(username="carol"))
        store.update_user_online_status(bob.id, False)

        online = store.get_online_users()

        assert sorted(u.username for u in online) == ["alice", "carol"]
        assert alice.id in {u.id for u in online}

    def test_returned_users_are_copies(self, store):
        user = store.create_user(UserCreate(username="alice"))
        user.is_online = False

        fetched = store.get_user(user.id)
        fetched.is_online = False

        assert store.get_user(user.id).is_online is True


class TestMessages:

    def test_create_message_defaults(self, store, clock):
        message = post(store, "hi")

        assert message.id
        assert message.type == MessageType.MESSAGE
        assert message.type == "message"
        assert message.timestamp == clock.now
        assert message.sender_username == "alice"

    def test_create_message_keeps_type(self, store):
        message = post(store, "alice joined the chat", type=MessageType.JOIN)
        assert message.type == "join"

    def test_orphan_sender_is_tolerated(self, store):
        message = post(store, "hello", sender_id="no-such-user", sender_username="ghost")
        assert store.get_messages()[-1].id == message.id

    def test_new_message_is_last(self, store, clock):
        for i in range(5):
            post(store, f"m{i}")
            clock.advance(milliseconds=1)
        latest = post(store, "latest")

        messages = store.get_messages(limit=50)

        assert len(messages) == 6
        assert messages[-1].id == latest.id

    def test_get_messages_returns_most_recent_window(self, store, clock):
        for i in range(10):
            post(store, f"m{i}")
            clock.advance(milliseconds=1)

        messages = store.get_messages(limit=3)

        assert [m.content for m in messages] == ["m7", "m8", "m9"]

    def test_get_messages_non_positive_limit(self, store):
        post(store, "hi")
        assert store.get_messages(limit=0) == []

    def test_equal_timestamps_keep_insertion_order(self, store):
        # clock never advances: every message shares one timestamp
        for i in range(5):
            post(store, f"m{i}")

        messages = store.get_messages()

        assert [m.content for m in messages] == ["m0", "m1", "m2", "m3", "m4"]
        assert len({m.timestamp for m in messages}) == 1

    def test_timestamps_never_go_backwards(self, store, clock):
        first = post(store, "first")
        clock.rewind(seconds=10)
        second = post(store, "second")

        assert second.timestamp == first.timestamp
        assert [m.content for m in store.get_messages()] == ["first", "second"]

    def test_get_messages_after_is_strict(self, store, clock):
        stamps = []
        for i in range(4):
            stamps.append(post(store, f"m{i}").timestamp)
            clock.advance(seconds=1)

        after = store.get_messages_after(stamps[1])

        assert [m.content for m in after] == ["m2", "m3"]
        assert all(m.timestamp > stamps[1] for m in after)

    def test_get_messages_after_latest_is_empty(self, store, clock):
        post(store, "a")
        clock.advance(seconds=1)
        latest = post(store, "b")

        assert store.get_messages_after(latest.timestamp) == []
        assert store.get_messages_after(latest.timestamp + timedelta(hours=1)) == []

    def test_get_messages_after_is_unbounded(self, store, clock):
        start = clock.now - timedelta(seconds=1)
        for i in range(120):
            post(store, f"m{i}")
            clock.advance(milliseconds=1)

        assert len(store.get_messages_after(start)) == 120

    def test_get_messages_after_accepts_naive_utc(self, store, clock):
        post(store, "old")
        clock.advance(seconds=5)
        post(store, "new")

        naive = (clock.now - timedelta(seconds=1)).replace(tzinfo=None)

        assert [m.content for m in store.get_messages_after(naive)] == ["new"]

    def test_count_messages(self, store):
        assert store.count_messages() == 0
        post(store, "a")
        post(store, "b")
        assert store.count_messages() == 2


class TestConcurrency:
    """Threaded handlers hitting one store at the same time"""

    def test_simultaneous_messages(self, store):
        count = 40

        with ThreadPoolExecutor(max_workers=8) as executor:
            futures = [executor.submit(post, store, f"m{i}") for i in range(count)]
            created = [f.result() for f in as_completed(futures)]

        assert len({m.id for m in created}) == count
        assert store.count_messages() == count

        stored = store.get_messages(limit=count)
        assert len(stored) == count
        timestamps = [m.timestamp for m in stored]
        assert timestamps == sorted(timestamps)

    def test_simultaneous_same_username(self, store):
        def attempt():
            try:
                store.create_user(UserCreate(username="alice"))
                return True
            except UsernameTakenError:
                return False

        with ThreadPoolExecutor(max_workers=5) as executor:
            results = [f.result() for f in [executor.submit(attempt) for _ in range(5)]]

        assert results.count(True) == 1
        assert store.count_users() == 1


def test_sql_store_resumes_clock_from_existing_rows(tmp_path, clock):
    from chatroom.store import SQLStore

    url = f"sqlite:///{tmp_path / 'chat.db'}"
    first = SQLStore(url, clock=clock)
    message = post(first, "before")
    first.close()

    clock.rewind(minutes=5)
    second = SQLStore(url, clock=clock)
    later = post(second, "after")
    second.close()

    assert later.timestamp == message.timestamp
    assert isinstance(later.timestamp, datetime)
