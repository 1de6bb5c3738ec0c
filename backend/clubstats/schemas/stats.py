from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class TeamStatsOut(BaseModel):
    id: str | None = None
    name: str
    color: str | None = None

    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    total_games: int = 0
    points: int = 0
    win_rate: str = "0%"


class PlayerStatsOut(BaseModel):
    id: str
    name: str
    nickname: str | None = None

    games: int = 0
    goals: int = 0
    own_goals: int = 0
    saves: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0

    points: float = 0
    goal_average: float = 0
    win_rate: str = "0%"
    position: int = 0


class ParticipationRankingOut(BaseModel):
    id: str
    name: str
    nickname: str

    points: float
    games: int
    membership_time: int  # days
    membership_years: float
    age: int
    position: int

    participation_rate: float  # against every game of the period
    effective_participation_rate: float  # only games after registration


class GameSummaryOut(BaseModel):
    average_goals_per_game: float
    average_players_per_game: float
    completion_rate: float


class GameParticipationOut(BaseModel):
    game_id: str
    confirmed: int
    declined: int


class TopHighlightOut(BaseModel):
    id: str
    name: str
    nickname: str | None = None
    highlight_count: int
    position: int


class CompletedGamesOut(BaseModel):
    total: int
    this_month: int


class TeamScoreOut(BaseModel):
    name: str
    color: str | None = None
    goals: int = 0
    result: str | None = None  # "win" | "draw" | "loss"; None when the team has no events


class PlayerEventsOut(BaseModel):
    member_id: str
    name: str
    team: str
    goals: int = 0
    own_goals: int = 0
    saves: int = 0


class GameScorelineOut(BaseModel):
    game_id: str
    date: dt.date
    status: str
    teams: list[TeamScoreOut]
    total_goals: int  # goal and own-goal events
    total_saves: int
    players: list[PlayerEventsOut]


class MemberGameOut(BaseModel):
    game_id: str
    date: dt.date
    location: str | None = None
    game_status: str
    status: str


class MemberGamesOut(BaseModel):
    member_id: str
    games: list[MemberGameOut]

    goals: int = 0
    own_goals: int = 0
    saves: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
