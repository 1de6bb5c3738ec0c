# clubstats/services/game_summary.py
from __future__ import annotations

from datetime import date
from fractions import Fraction
from typing import Optional

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.periods import PeriodValue, round_half_up, year_window
from clubstats.crud.crud_highlights import get_game
from clubstats.crud.crud_stats import count_completed_games, fetch_events_for_games, fetch_games, fetch_participants
from clubstats.models.games import (
    EVENT_GOAL,
    EVENT_OWN_GOAL,
    GAME_CANCELED_STATUSES,
    GAME_COMPLETED,
    PARTICIPANT_CONFIRMED,
    PARTICIPANT_DECLINED,
)
from clubstats.models.members import MEMBER_SYSTEM
from clubstats.schemas.stats import CompletedGamesOut, GameParticipationOut, GameSummaryOut

logger = get_logger(__name__)


def _ratio(part: int, whole: int, scale: int = 1) -> float:
    if whole <= 0:
        return 0.0
    return float(round_half_up(Fraction(part * scale, whole), 2))


def compute_game_summary(
    db: Session,
    club_id: str,
    year: PeriodValue = "all",
    today: Optional[date] = None,
) -> GameSummaryOut:
    """Dashboard figures for one calendar year ("all" = current year)."""
    period = year_window(year, today)

    games = fetch_games(db, club_id, period, statuses=None)
    completed = [g.id for g in games if g.status == GAME_COMPLETED]
    canceled = [g.id for g in games if g.status in GAME_CANCELED_STATUSES]

    # scheduled games do not count against the completion rate
    completion_rate = _ratio(len(completed), len(completed) + len(canceled), 100)

    if not completed:
        return GameSummaryOut(average_goals_per_game=0, average_players_per_game=0, completion_rate=completion_rate)

    goal_events = fetch_events_for_games(db, completed, event_types=(EVENT_GOAL, EVENT_OWN_GOAL))
    games_with_goals = {ev.game_id for ev in goal_events}
    average_goals = _ratio(len(goal_events), len(games_with_goals))

    confirmed = [
        p for p in fetch_participants(db, completed, status=PARTICIPANT_CONFIRMED)
        if p.member_status != MEMBER_SYSTEM
    ]
    average_players = _ratio(len(confirmed), len(completed))

    logger.info(
        "game summary club=%s year=%s: %d completed, %d canceled",
        club_id, period.year, len(completed), len(canceled),
    )
    return GameSummaryOut(
        average_goals_per_game=average_goals,
        average_players_per_game=average_players,
        completion_rate=completion_rate,
    )


def get_game_participation_stats(db: Session, game_id: str) -> GameParticipationOut:
    get_game(db, game_id)

    confirmed = 0
    declined = 0
    for p in fetch_participants(db, [game_id]):
        if p.member_status == MEMBER_SYSTEM:
            continue
        if p.status == PARTICIPANT_CONFIRMED:
            confirmed += 1
        elif p.status == PARTICIPANT_DECLINED:
            declined += 1

    return GameParticipationOut(game_id=game_id, confirmed=confirmed, declined=declined)


def compute_completed_game_counts(db: Session, club_id: str, today: Optional[date] = None) -> CompletedGamesOut:
    """Completed games of the club, ever and since the first day of the current month."""
    first_of_month = (today or date.today()).replace(day=1)
    return CompletedGamesOut(
        total=count_completed_games(db, club_id),
        this_month=count_completed_games(db, club_id, since=first_of_month),
    )
