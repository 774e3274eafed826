"""
Room message table
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from .base import Base


class MessageRecord(Base):
    """
    Message row.

    `seq` is the insertion order and breaks ties between equal timestamps.
    `sender_id` is not a foreign key; orphaned senders are tolerated.
    """
    __tablename__ = "messages"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True)
    content = Column(Text, nullable=False)
    sender_id = Column(String(36), nullable=False, index=True)
    sender_username = Column(Text, nullable=False)
    type = Column(String(10), nullable=False, default="message")
    timestamp = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_messages_timestamp_seq', 'timestamp', 'seq'),
    )

    def __repr__(self):
        return f"<MessageRecord(seq={self.seq}, type={self.type}, content='{self.content[:20]}...')>"
