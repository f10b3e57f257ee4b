from sqlalchemy import Column, DateTime, Index, JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from .db import Base


class ScoreRecord(Base):
    """One persisted record of a match group (``match:{M}``, ``...:summary``,
    ``...:completed``) keyed by its full store key."""

    __tablename__ = "score_record"
    key = Column(String, primary_key=True)
    match_id = Column(String, nullable=False)
    payload = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_score_record_match_id", "match_id"),)
