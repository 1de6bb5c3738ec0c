# clubstats/services/team_stats.py
from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.periods import PeriodValue, parse_period, percent_label
from clubstats.crud.crud_stats import fetch_club_events, fetch_team_configurations
from clubstats.schemas.records import EventRecord, TeamConfigRecord
from clubstats.schemas.stats import TeamStatsOut
from clubstats.services.goal_tally import DRAW, LOSS, POINTS_BY_RESULT, WIN, tally_games

logger = get_logger(__name__)


def build_team_stats(
    configs: Iterable[TeamConfigRecord],
    events: Iterable[EventRecord],
) -> list[TeamStatsOut]:
    """Standings table from already-fetched rows. Pure."""
    teams: dict[str, TeamStatsOut] = {}
    for c in configs:
        teams.setdefault(c.team_name, TeamStatsOut(id=c.id, name=c.team_name, color=c.team_color))

    for tally in tally_games(events).values():
        for team in tally.teams:
            row = teams.get(team)
            if row is None:
                # label used on the game sheet but missing from the catalog: still reported
                row = teams[team] = TeamStatsOut(name=team)

            row.total_games += 1
            row.goals_scored += tally.goals_for(team)
            row.goals_conceded += tally.conceded_by(team)

            result = tally.result_for(team)
            if result == WIN:
                row.wins += 1
            elif result == DRAW:
                row.draws += 1
            elif result == LOSS:
                row.losses += 1
            row.points += POINTS_BY_RESULT[result]

    out = list(teams.values())
    for row in out:
        row.win_rate = percent_label(row.wins, row.total_games)

    # sorted() is stable: equal points keep catalog / first-appearance order
    return sorted(out, key=lambda r: r.points, reverse=True)


def compute_team_stats(
    db: Session,
    club_id: str,
    year: PeriodValue,
    month: PeriodValue = "all",
) -> list[TeamStatsOut]:
    period = parse_period(year, month)

    configs = fetch_team_configurations(db, club_id)
    events = fetch_club_events(db, club_id, period)

    out = build_team_stats(configs, events)
    logger.info(
        "team stats club=%s period=%s/%s: %d events -> %d teams",
        club_id, year, month, len(events), len(out),
    )
    return out
