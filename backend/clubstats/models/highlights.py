from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from clubstats.db.base import Base, new_id


class GameHighlight(Base):
    """Per-game, per-member tally of "player of the match" votes."""

    __tablename__ = "game_highlights"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)

    votes_count = Column(Integer, nullable=False, default=0)
    is_winner = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("game_id", "member_id", name="uq_highlight_game_member"),
    )


class GameHighlightVote(Base):
    __tablename__ = "game_highlight_votes"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    voter_id = Column(String(36), ForeignKey("members.id"), nullable=False)
    voted_for = Column(String(36), ForeignKey("members.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # one vote per voter and game, enforced by the store
        UniqueConstraint("game_id", "voter_id", name="uq_highlight_vote_game_voter"),
    )


class GameVotingControl(Base):
    __tablename__ = "game_voting_control"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, unique=True)

    is_finalized = Column(Boolean, nullable=False, default=False)
    finalized_at = Column(DateTime, nullable=True)
    winner_member_id = Column(String(36), ForeignKey("members.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
