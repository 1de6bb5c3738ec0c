from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class HighlightMemberOut(BaseModel):
    name: str | None = None
    nickname: str | None = None
    photo_url: str | None = None
    birth_date: date | None = None


class HighlightOut(BaseModel):
    id: str
    game_id: str
    member_id: str
    votes_count: int
    is_winner: bool
    member: HighlightMemberOut | None = None


class VoteIn(BaseModel):
    voted_for: str = Field(min_length=1, max_length=36)


class VoteOut(BaseModel):
    id: str
    game_id: str
    voter_id: str
    voted_for: str
    created_at: datetime


class HasVotedOut(BaseModel):
    game_id: str
    voter_id: str
    has_voted: bool


class VotingStatusOut(BaseModel):
    game_id: str
    is_finalized: bool
    finalized_at: datetime | None = None
    winner: HighlightOut | None = None
    highlights: list[HighlightOut] = []
    votes: list[VoteOut] = []
