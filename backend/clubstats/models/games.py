from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)

from clubstats.db.base import Base, new_id

GAME_SCHEDULED = "scheduled"
GAME_COMPLETED = "completed"
GAME_CANCELED = "canceled"
# older rows carry the British spelling
GAME_CANCELED_STATUSES = (GAME_CANCELED, "cancelled")

EVENT_GOAL = "goal"
EVENT_OWN_GOAL = "own-goal"
EVENT_SAVE = "save"

PARTICIPANT_CONFIRMED = "confirmed"
PARTICIPANT_DECLINED = "declined"
PARTICIPANT_UNCONFIRMED = "unconfirmed"


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=new_id)
    club_id = Column(String(36), ForeignKey("clubs.id"), nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    location = Column(String, nullable=True)
    status = Column(String, nullable=False, default=GAME_SCHEDULED)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_games_club_status_date", "club_id", "status", "date"),
    )


class GameEvent(Base):
    """Immutable log entry written by the game panel."""

    __tablename__ = "game_events"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=True, index=True)

    team = Column(String, nullable=False)
    event_type = Column(String, nullable=False)  # "goal" | "own-goal" | "save"

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class GameParticipant(Base):
    __tablename__ = "game_participants"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default=PARTICIPANT_UNCONFIRMED)

    __table_args__ = (
        UniqueConstraint("game_id", "member_id", name="uq_game_participant"),
    )
