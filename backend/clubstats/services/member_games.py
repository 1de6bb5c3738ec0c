# clubstats/services/member_games.py
from __future__ import annotations

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.periods import PeriodValue, parse_period
from clubstats.crud.crud_stats import (
    fetch_active_formations,
    fetch_events_for_games,
    fetch_latest_team_by_member,
    fetch_member_games,
    fetch_team_assignments,
    get_member,
)
from clubstats.models.games import EVENT_GOAL, EVENT_OWN_GOAL, EVENT_SAVE, GAME_COMPLETED, PARTICIPANT_CONFIRMED
from clubstats.schemas.stats import MemberGameOut, MemberGamesOut
from clubstats.services.goal_tally import DRAW, LOSS, WIN, tally_games
from clubstats.services.player_stats import TeamLookup

logger = get_logger(__name__)


def get_member_games(db: Session, member_id: str, year: PeriodValue = "all") -> MemberGamesOut:
    """
    Games a member answered in the year (newest first) and their score card.

    The card counts the member's own events and the result of their team in
    every completed game they confirmed, with the same team rules as the
    player ranking.
    """
    get_member(db, member_id)
    period = parse_period(year)

    rows = fetch_member_games(db, member_id, period)
    out = MemberGamesOut(
        member_id=member_id,
        games=[
            MemberGameOut(
                game_id=r.game_id,
                date=r.date,
                location=r.location,
                game_status=r.game_status,
                status=r.status,
            )
            for r in rows
        ],
    )

    played = [r.game_id for r in rows if r.status == PARTICIPANT_CONFIRMED and r.game_status == GAME_COMPLETED]
    if not played:
        return out

    events = fetch_events_for_games(db, played)
    formation_by_game = fetch_active_formations(db, played)
    teams = TeamLookup.build(
        formation_by_game,
        fetch_team_assignments(db, formation_by_game.values()),
        fetch_latest_team_by_member(db, [member_id]),
    )

    for ev in events:
        if ev.member_id != member_id:
            continue
        if ev.event_type == EVENT_GOAL:
            out.goals += 1
        elif ev.event_type == EVENT_OWN_GOAL:
            out.own_goals += 1
        elif ev.event_type == EVENT_SAVE:
            out.saves += 1

    for game_id, tally in tally_games(events).items():
        team = teams.team_for(game_id, member_id)
        if not team:
            logger.warning("no team found for member %s in game %s", member_id, game_id)
            continue
        result = tally.result_for(team)
        if result == WIN:
            out.wins += 1
        elif result == DRAW:
            out.draws += 1
        elif result == LOSS:
            out.losses += 1

    return out
