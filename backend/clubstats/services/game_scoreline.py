# clubstats/services/game_scoreline.py
from __future__ import annotations

from sqlalchemy.orm import Session

from clubstats.crud.crud_highlights import get_game
from clubstats.crud.crud_stats import fetch_events_for_games, fetch_members, fetch_team_configurations
from clubstats.models.games import EVENT_GOAL, EVENT_OWN_GOAL, EVENT_SAVE
from clubstats.schemas.stats import GameScorelineOut, PlayerEventsOut, TeamScoreOut
from clubstats.services.goal_tally import tally_game


def get_game_scoreline(db: Session, game_id: str) -> GameScorelineOut:
    """Score of every team of one game, plus per-player event counts."""
    game = get_game(db, game_id)
    configs = fetch_team_configurations(db, game.club_id)
    events = fetch_events_for_games(db, [game_id])

    tally = tally_game(events, game_id)

    # catalog teams start at zero even when they never appear on the sheet
    teams: dict[str, TeamScoreOut] = {
        c.team_name: TeamScoreOut(name=c.team_name, color=c.team_color) for c in configs
    }
    for team in tally.teams:
        row = teams.setdefault(team, TeamScoreOut(name=team))
        row.goals = tally.goals_for(team)
        row.result = tally.result_for(team)

    players: dict[str, PlayerEventsOut] = {}
    member_ids = list(dict.fromkeys(ev.member_id for ev in events if ev.member_id))
    names = {m.id: m.nickname or m.name for m in fetch_members(db, member_ids)} if member_ids else {}
    for ev in events:
        if not ev.member_id:
            continue
        row = players.get(ev.member_id)
        if row is None:
            row = players[ev.member_id] = PlayerEventsOut(
                member_id=ev.member_id,
                name=names.get(ev.member_id, ev.member_id),
                team=ev.team,
            )
        if ev.event_type == EVENT_GOAL:
            row.goals += 1
        elif ev.event_type == EVENT_OWN_GOAL:
            row.own_goals += 1
        elif ev.event_type == EVENT_SAVE:
            row.saves += 1

    return GameScorelineOut(
        game_id=game.id,
        date=game.date,
        status=game.status,
        teams=list(teams.values()),
        total_goals=sum(1 for ev in events if ev.event_type in (EVENT_GOAL, EVENT_OWN_GOAL)),
        total_saves=sum(1 for ev in events if ev.event_type == EVENT_SAVE),
        players=list(players.values()),
    )
