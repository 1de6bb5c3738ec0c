from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, UniqueConstraint

from clubstats.db.base import Base, new_id


class TeamConfiguration(Base):
    """Club-wide catalog of team names and colors, independent of any game."""

    __tablename__ = "team_configurations"

    id = Column(String(36), primary_key=True, default=new_id)
    club_id = Column(String(36), ForeignKey("clubs.id"), nullable=False, index=True)

    team_name = Column(String, nullable=False)
    team_color = Column(String, nullable=True)  # e.g. "#1d4ed8"
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("club_id", "team_name", name="uq_team_config_club_name"),
    )


class TeamFormation(Base):
    """Lineup of one game. At most one active formation per game."""

    __tablename__ = "team_formations"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_team_formations_game_active", "game_id", "is_active"),
    )


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(String(36), primary_key=True, default=new_id)
    team_formation_id = Column(String(36), ForeignKey("team_formations.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)

    team = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("team_formation_id", "member_id", name="uq_team_member_formation"),
    )
