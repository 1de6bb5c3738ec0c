# clubstats/crud/crud_stats.py
"""Batch reads for the aggregators.

Every function issues a fixed number of queries (chunked IN lists), never one
query per game or per member.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from clubstats.core.errors import NotFoundError
from clubstats.core.periods import Period
from clubstats.crud.base import chunked, store_call
from clubstats.models.games import (
    EVENT_GOAL,
    EVENT_OWN_GOAL,
    EVENT_SAVE,
    GAME_COMPLETED,
    PARTICIPANT_CONFIRMED,
    Game,
    GameEvent,
    GameParticipant,
)
from clubstats.models.members import MEMBER_ACTIVE, Member
from clubstats.models.teams import TeamConfiguration, TeamFormation, TeamMember
from clubstats.schemas.records import (
    EventRecord,
    GameRecord,
    MemberGameRecord,
    MemberRecord,
    ParticipantRecord,
    TeamAssignmentRecord,
    TeamConfigRecord,
)

KNOWN_EVENT_TYPES = (EVENT_GOAL, EVENT_OWN_GOAL, EVENT_SAVE)


def _in_period(q, period: Period):
    if period.is_bounded:
        q = q.filter(Game.date >= period.start, Game.date <= period.end)
    return q


@store_call
def fetch_team_configurations(db: Session, club_id: str) -> list[TeamConfigRecord]:
    rows = (
        db.query(TeamConfiguration)
        .filter(TeamConfiguration.club_id == club_id, TeamConfiguration.is_active == True)  # noqa: E712
        .order_by(TeamConfiguration.created_at.asc(), TeamConfiguration.id.asc())
        .all()
    )
    return [TeamConfigRecord.model_validate(r) for r in rows]


@store_call
def fetch_games(
    db: Session,
    club_id: str,
    period: Period,
    statuses: Optional[Iterable[str]] = (GAME_COMPLETED,),
) -> list[GameRecord]:
    q = db.query(Game).filter(Game.club_id == club_id)
    if statuses is not None:
        q = q.filter(Game.status.in_(list(statuses)))
    q = _in_period(q, period)
    rows = q.order_by(Game.date.asc(), Game.created_at.asc(), Game.id.asc()).all()
    return [GameRecord.model_validate(r) for r in rows]


@store_call
def fetch_club_events(db: Session, club_id: str, period: Period) -> list[EventRecord]:
    """Every known event of the club's completed games inside the period."""
    q = (
        db.query(GameEvent)
        .join(Game, Game.id == GameEvent.game_id)
        .filter(
            Game.club_id == club_id,
            Game.status == GAME_COMPLETED,
            GameEvent.event_type.in_(KNOWN_EVENT_TYPES),
        )
    )
    q = _in_period(q, period)
    rows = q.order_by(Game.date.asc(), Game.id.asc(), GameEvent.created_at.asc(), GameEvent.id.asc()).all()
    return [EventRecord.model_validate(r) for r in rows]


@store_call
def fetch_events_for_games(
    db: Session,
    game_ids: Iterable[str],
    event_types: Iterable[str] = KNOWN_EVENT_TYPES,
) -> list[EventRecord]:
    types = list(event_types)
    out: list[EventRecord] = []
    for batch in chunked(game_ids):
        rows = (
            db.query(GameEvent)
            .filter(GameEvent.game_id.in_(batch), GameEvent.event_type.in_(types))
            .order_by(GameEvent.game_id.asc(), GameEvent.created_at.asc(), GameEvent.id.asc())
            .all()
        )
        out.extend(EventRecord.model_validate(r) for r in rows)
    return out


@store_call
def fetch_participants(
    db: Session,
    game_ids: Iterable[str],
    status: Optional[str] = None,
) -> list[ParticipantRecord]:
    out: list[ParticipantRecord] = []
    for batch in chunked(game_ids):
        q = (
            db.query(GameParticipant, Member)
            .join(Member, Member.id == GameParticipant.member_id)
            .filter(GameParticipant.game_id.in_(batch))
        )
        if status is not None:
            q = q.filter(GameParticipant.status == status)
        rows = q.order_by(GameParticipant.game_id.asc(), Member.name.asc(), Member.id.asc()).all()
        for p, m in rows:
            out.append(
                ParticipantRecord(
                    game_id=p.game_id,
                    member_id=p.member_id,
                    status=p.status,
                    member_status=m.status,
                    member_name=m.name,
                    member_nickname=m.nickname,
                )
            )
    return out


@store_call
def fetch_confirmed_participants(db: Session, game_ids: Iterable[str]) -> list[ParticipantRecord]:
    return fetch_participants(db, game_ids, status=PARTICIPANT_CONFIRMED)


@store_call
def fetch_active_formations(db: Session, game_ids: Iterable[str]) -> dict[str, str]:
    """game_id -> id of its active formation (the newest one if the data has several)."""
    out: dict[str, str] = {}
    for batch in chunked(game_ids):
        rows = (
            db.query(TeamFormation)
            .filter(TeamFormation.game_id.in_(batch), TeamFormation.is_active == True)  # noqa: E712
            .order_by(TeamFormation.created_at.desc(), TeamFormation.id.desc())
            .all()
        )
        for f in rows:
            out.setdefault(f.game_id, f.id)
    return out


@store_call
def fetch_team_assignments(db: Session, formation_ids: Iterable[str]) -> list[TeamAssignmentRecord]:
    out: list[TeamAssignmentRecord] = []
    for batch in chunked(formation_ids):
        rows = (
            db.query(TeamMember.team_formation_id, TeamFormation.game_id, TeamMember.member_id, TeamMember.team)
            .join(TeamFormation, TeamFormation.id == TeamMember.team_formation_id)
            .filter(TeamMember.team_formation_id.in_(batch))
            .all()
        )
        out.extend(
            TeamAssignmentRecord(formation_id=fid, game_id=gid, member_id=mid, team=team)
            for fid, gid, mid, team in rows
        )
    return out


@store_call
def fetch_latest_team_by_member(db: Session, member_ids: Iterable[str]) -> dict[str, str]:
    """member_id -> team label of their most recent assignment in any formation."""
    out: dict[str, str] = {}
    for batch in chunked(member_ids):
        rows = (
            db.query(TeamMember.member_id, TeamMember.team)
            .join(TeamFormation, TeamFormation.id == TeamMember.team_formation_id)
            .join(Game, Game.id == TeamFormation.game_id)
            .filter(TeamMember.member_id.in_(batch))
            .order_by(TeamFormation.created_at.desc(), Game.date.desc(), TeamFormation.id.desc())
            .all()
        )
        for member_id, team in rows:
            out.setdefault(member_id, team)
    return out


@store_call
def fetch_active_members(db: Session, club_id: str) -> list[MemberRecord]:
    rows = (
        db.query(Member)
        .filter(Member.club_id == club_id, Member.status == MEMBER_ACTIVE)
        .order_by(Member.name.asc(), Member.id.asc())
        .all()
    )
    return [MemberRecord.model_validate(r) for r in rows]


@store_call
def get_member(db: Session, member_id: str) -> MemberRecord:
    m = db.query(Member).filter(Member.id == member_id).first()
    if not m:
        raise NotFoundError(f"Member {member_id} not found")
    return MemberRecord.model_validate(m)


@store_call
def fetch_members(db: Session, member_ids: Iterable[str]) -> list[MemberRecord]:
    out: list[MemberRecord] = []
    for batch in chunked(member_ids):
        rows = db.query(Member).filter(Member.id.in_(batch)).all()
        out.extend(MemberRecord.model_validate(r) for r in rows)
    return out


@store_call
def fetch_member_games(db: Session, member_id: str, period: Period) -> list[MemberGameRecord]:
    """Every game the member answered, newest first."""
    q = (
        db.query(GameParticipant, Game)
        .join(Game, Game.id == GameParticipant.game_id)
        .filter(GameParticipant.member_id == member_id)
    )
    q = _in_period(q, period)
    rows = q.order_by(Game.date.desc(), Game.created_at.desc(), Game.id.asc()).all()
    return [
        MemberGameRecord(
            game_id=g.id,
            date=g.date,
            game_status=g.status,
            location=g.location,
            status=p.status,
        )
        for p, g in rows
    ]


@store_call
def count_completed_games(db: Session, club_id: str, since: Optional[date] = None) -> int:
    q = db.query(func.count(Game.id)).filter(Game.club_id == club_id, Game.status == GAME_COMPLETED)
    if since is not None:
        q = q.filter(Game.date >= since)
    return int(q.scalar() or 0)
