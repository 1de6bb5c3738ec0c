from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clubstats.core.config import settings
from clubstats.db.session import get_db
from clubstats.schemas.stats import (
    CompletedGamesOut,
    GameParticipationOut,
    GameScorelineOut,
    GameSummaryOut,
    MemberGamesOut,
    ParticipationRankingOut,
    PlayerStatsOut,
    TeamStatsOut,
    TopHighlightOut,
)
from clubstats.services.game_scoreline import get_game_scoreline
from clubstats.services.game_summary import (
    compute_completed_game_counts,
    compute_game_summary,
    get_game_participation_stats,
)
from clubstats.services.member_games import get_member_games
from clubstats.services.participation_ranking import compute_participation_ranking
from clubstats.services.player_stats import compute_player_stats
from clubstats.services.team_stats import compute_team_stats
from clubstats.services.top_highlights import compute_top_highlights

router = APIRouter(prefix="/api/v1", tags=["stats"])


def _clean(value: str) -> str:
    return (value or "all").strip() or "all"


@router.get("/clubs/{club_id}/stats/teams", response_model=list[TeamStatsOut])
def team_stats(
    club_id: str,
    year: str = Query(default="all"),
    month: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return compute_team_stats(db, club_id.strip(), _clean(year), _clean(month))


@router.get("/clubs/{club_id}/stats/players", response_model=list[PlayerStatsOut])
def player_stats(
    club_id: str,
    year: str = Query(default="all"),
    month: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return compute_player_stats(db, club_id.strip(), _clean(year), _clean(month))


@router.get("/clubs/{club_id}/stats/participation", response_model=list[ParticipationRankingOut])
def participation_ranking(
    club_id: str,
    year: str = Query(default="all"),
    month: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return compute_participation_ranking(db, club_id.strip(), _clean(year), _clean(month))


@router.get("/clubs/{club_id}/stats/summary", response_model=GameSummaryOut)
def game_summary(
    club_id: str,
    year: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return compute_game_summary(db, club_id.strip(), _clean(year))


@router.get("/clubs/{club_id}/highlights/top", response_model=list[TopHighlightOut])
def top_highlights(
    club_id: str,
    year: str = Query(default="all"),
    limit: int = Query(default=settings.TOP_HIGHLIGHTS_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return compute_top_highlights(db, club_id.strip(), _clean(year), limit=limit)


@router.get("/games/{game_id}/participation", response_model=GameParticipationOut)
def game_participation(game_id: str, db: Session = Depends(get_db)):
    return get_game_participation_stats(db, game_id.strip())


@router.get("/clubs/{club_id}/stats/completed-games", response_model=CompletedGamesOut)
def completed_games(club_id: str, db: Session = Depends(get_db)):
    return compute_completed_game_counts(db, club_id.strip())


@router.get("/games/{game_id}/scoreline", response_model=GameScorelineOut)
def game_scoreline(game_id: str, db: Session = Depends(get_db)):
    return get_game_scoreline(db, game_id.strip())


@router.get("/members/{member_id}/games", response_model=MemberGamesOut)
def member_games(
    member_id: str,
    year: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return get_member_games(db, member_id.strip(), _clean(year))
