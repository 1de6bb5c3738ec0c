"""Typed rows read from the store.

The crud layer validates every row it hands to the services through one of
these models, so the aggregators never see loosely-typed join results.
"""
from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

EventType = Literal["goal", "own-goal", "save"]


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


class GameRecord(_Record):
    id: str
    club_id: str
    date: dt.date
    status: str
    location: Optional[str] = None


class EventRecord(_Record):
    game_id: str
    member_id: Optional[str] = None
    team: str
    event_type: EventType


class MemberRecord(_Record):
    id: str
    name: str
    nickname: Optional[str] = None
    status: str
    birth_date: Optional[dt.date] = None
    registration_date: Optional[dt.date] = None


class ParticipantRecord(_Record):
    game_id: str
    member_id: str
    status: str

    member_status: Optional[str] = None
    member_name: Optional[str] = None
    member_nickname: Optional[str] = None


class TeamConfigRecord(_Record):
    id: str
    team_name: str
    team_color: Optional[str] = None


class TeamAssignmentRecord(_Record):
    formation_id: str
    game_id: str
    member_id: str
    team: str


class HighlightRecord(_Record):
    id: str
    game_id: str
    member_id: str
    votes_count: int
    is_winner: bool

    member_name: Optional[str] = None
    member_nickname: Optional[str] = None
    member_photo_url: Optional[str] = None
    member_birth_date: Optional[dt.date] = None


class VoteRecord(_Record):
    id: str
    game_id: str
    voter_id: str
    voted_for: str
    created_at: dt.datetime


class VotingControlRecord(_Record):
    game_id: str
    is_finalized: bool
    finalized_at: Optional[dt.datetime] = None
    winner_member_id: Optional[str] = None


class MemberGameRecord(_Record):
    game_id: str
    date: dt.date
    game_status: str
    location: Optional[str] = None
    status: str  # the member's answer for that game
