"""
SQLAlchemy-backed store.

Same contract as the in-memory store. Datetimes are stored as naive UTC
and converted back to aware UTC on the way out.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from chatroom.core.exceptions import UsernameTakenError
from chatroom.models import Base, UserRecord, MessageRecord
from chatroom.schemas import User, UserCreate, Message, MessageCreate, MessageType
from chatroom.store.base import ChatStore
from chatroom.utils import as_utc, new_id

logger = logging.getLogger(__name__)


def _to_db_time(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        is_online=record.is_online,
        last_seen=as_utc(record.last_seen),
    )


def _to_message(record: MessageRecord) -> Message:
    return Message(
        id=record.id,
        content=record.content,
        sender_id=record.sender_id,
        sender_username=record.sender_username,
        type=record.type,
        timestamp=as_utc(record.timestamp),
    )


def create_db_engine(database_url: str) -> Engine:
    """Create engine; in-memory SQLite shares one connection across threads"""
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        # only SQLite needs these
        opts = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            opts["poolclass"] = StaticPool
        return create_engine(database_url, **opts)
    return create_engine(database_url, pool_pre_ping=True)


class SQLStore(ChatStore):
    """Store backed by a relational database through SQLAlchemy"""

    backend = "sql"

    def __init__(
        self,
        database_url: str = "sqlite://",
        clock: Optional[Callable[[], datetime]] = None,
        engine: Optional[Engine] = None,
    ):
        super().__init__(clock)
        self.engine = engine or create_db_engine(database_url)
        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        # one lock for every operation: in-memory SQLite shares a single connection
        self._lock = threading.RLock()

        Base.metadata.create_all(bind=self.engine)

        with self._lock, self._session() as db:
            latest = db.query(func.max(MessageRecord.timestamp)).scalar()
        if latest is not None:
            self._last_timestamp = as_utc(latest)

        logger.info(f"SQL store ready ({self.engine.url.drivername})")

    def _session(self) -> Session:
        return self.SessionLocal()

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock, self._session() as db:
            record = db.get(UserRecord, user_id)
            return _to_user(record) if record else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock, self._session() as db:
            record = db.query(UserRecord).filter(UserRecord.username == username).first()
            return _to_user(record) if record else None

    def create_user(self, user_data: UserCreate) -> User:
        with self._lock, self._session() as db:
            if db.query(UserRecord).filter(UserRecord.username == user_data.username).first():
                raise UsernameTakenError()

            record = UserRecord(
                id=new_id(),
                username=user_data.username,
                is_online=True,
                last_seen=_to_db_time(self._now()),
            )
            db.add(record)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise UsernameTakenError()

            user = _to_user(record)

        logger.info("User created", extra={"user_id": user.id, "username": user.username})
        return user

    def update_user_online_status(self, user_id: str, is_online: bool) -> None:
        with self._lock, self._session() as db:
            record = db.get(UserRecord, user_id)
            if record is None:
                logger.debug(f"Status update for unknown user {user_id} ignored")
                return
            record.is_online = is_online
            record.last_seen = _to_db_time(self._now())
            db.commit()

    def get_online_users(self) -> List[User]:
        with self._lock, self._session() as db:
            records = db.query(UserRecord).filter(UserRecord.is_online == True).all()  # noqa: E712
            return [_to_user(r) for r in records]

    def count_users(self) -> int:
        with self._lock, self._session() as db:
            return db.query(UserRecord).count()

    def create_message(self, message_data: MessageCreate) -> Message:
        with self._lock, self._session() as db:
            record = MessageRecord(
                id=new_id(),
                content=message_data.content,
                sender_id=message_data.sender_id,
                sender_username=message_data.sender_username,
                type=MessageType(message_data.type or MessageType.MESSAGE).value,
                timestamp=_to_db_time(self._next_timestamp()),
            )
            db.add(record)
            db.commit()
            return _to_message(record)

    def get_messages(self, limit: int = 50) -> List[Message]:
        if limit <= 0:
            return []
        with self._lock, self._session() as db:
            records = (
                db.query(MessageRecord)
                .order_by(MessageRecord.timestamp.desc(), MessageRecord.seq.desc())
                .limit(limit)
                .all()
            )
            return [_to_message(r) for r in reversed(records)]

    def get_messages_after(self, timestamp: datetime) -> List[Message]:
        with self._lock, self._session() as db:
            records = (
                db.query(MessageRecord)
                .filter(MessageRecord.timestamp > _to_db_time(timestamp))
                .order_by(MessageRecord.timestamp, MessageRecord.seq)
                .all()
            )
            return [_to_message(r) for r in records]

    def count_messages(self) -> int:
        with self._lock, self._session() as db:
            return db.query(MessageRecord).count()

    def close(self) -> None:
        self.engine.dispose()
