# clubstats/services/player_stats.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.periods import PeriodValue, parse_period, percent_label
from clubstats.crud.crud_stats import (
    fetch_active_formations,
    fetch_confirmed_participants,
    fetch_club_events,
    fetch_latest_team_by_member,
    fetch_team_assignments,
)
from clubstats.models.games import EVENT_GOAL, EVENT_OWN_GOAL, EVENT_SAVE, PARTICIPANT_CONFIRMED
from clubstats.models.members import MEMBER_ACTIVE
from clubstats.schemas.records import EventRecord, ParticipantRecord, TeamAssignmentRecord
from clubstats.schemas.stats import PlayerStatsOut
from clubstats.services.goal_tally import DRAW, LOSS, WIN, group_events_by_game, tally_game

logger = get_logger(__name__)

# weights of the player ranking
POINTS_PER_GAME = 1
POINTS_PER_GOAL = 1
POINTS_PER_OWN_GOAL = -1
POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1
POINTS_PER_SAVE = 0.20


def player_points(games: int, goals: int, own_goals: int, wins: int, draws: int, saves: int) -> float:
    return (
        games * POINTS_PER_GAME
        + goals * POINTS_PER_GOAL
        + own_goals * POINTS_PER_OWN_GOAL
        + wins * POINTS_PER_WIN
        + draws * POINTS_PER_DRAW
        + saves * POINTS_PER_SAVE
    )


@dataclass
class TeamLookup:
    """Per-game team of a member: formation of that game first, latest known team otherwise."""

    formation_by_game: dict[str, str] = field(default_factory=dict)
    team_by_formation_member: dict[tuple[str, str], str] = field(default_factory=dict)
    fallback_by_member: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        formation_by_game: dict[str, str],
        assignments: Iterable[TeamAssignmentRecord],
        fallback_by_member: dict[str, str],
    ) -> "TeamLookup":
        return cls(
            formation_by_game=dict(formation_by_game),
            team_by_formation_member={(a.formation_id, a.member_id): a.team for a in assignments},
            fallback_by_member=dict(fallback_by_member),
        )

    def team_for(self, game_id: str, member_id: str) -> Optional[str]:
        formation_id = self.formation_by_game.get(game_id)
        if formation_id:
            team = self.team_by_formation_member.get((formation_id, member_id))
            if team:
                return team
        return self.fallback_by_member.get(member_id)


def _eligible(p: ParticipantRecord) -> bool:
    return p.status == PARTICIPANT_CONFIRMED and p.member_status == MEMBER_ACTIVE


def build_player_stats(
    events: Iterable[EventRecord],
    participants: Iterable[ParticipantRecord],
    teams: TeamLookup,
) -> list[PlayerStatsOut]:
    """Individual ranking from already-fetched rows. Pure."""
    events_by_game = group_events_by_game(events)

    participants_by_game: dict[str, list[ParticipantRecord]] = {}
    for p in participants:
        participants_by_game.setdefault(p.game_id, []).append(p)

    players: dict[str, PlayerStatsOut] = {}

    for game_id, game_events in events_by_game.items():
        tally = tally_game(game_events, game_id)

        for p in participants_by_game.get(game_id, []):
            if not _eligible(p):
                continue

            row = players.get(p.member_id)
            if row is None:
                row = players[p.member_id] = PlayerStatsOut(
                    id=p.member_id,
                    name=p.member_nickname or p.member_name or p.member_id,
                    nickname=p.member_nickname,
                )

            row.games += 1
            for ev in game_events:
                if ev.member_id != p.member_id:
                    continue
                if ev.event_type == EVENT_GOAL:
                    row.goals += 1
                elif ev.event_type == EVENT_OWN_GOAL:
                    row.own_goals += 1
                elif ev.event_type == EVENT_SAVE:
                    row.saves += 1

            team = teams.team_for(game_id, p.member_id)
            if not team:
                logger.warning("no team found for player %s in game %s", p.member_id, game_id)
                continue

            result = tally.result_for(team)
            if result == WIN:
                row.wins += 1
            elif result == DRAW:
                row.draws += 1
            elif result == LOSS:
                row.losses += 1

    out = list(players.values())
    for row in out:
        row.points = player_points(row.games, row.goals, row.own_goals, row.wins, row.draws, row.saves)
        row.goal_average = row.goals / row.games if row.games > 0 else 0
        row.win_rate = percent_label(row.wins, row.games)

    out = sorted(out, key=lambda r: r.points, reverse=True)
    for i, row in enumerate(out, start=1):
        row.position = i
    return out


def compute_player_stats(
    db: Session,
    club_id: str,
    year: PeriodValue = "all",
    month: PeriodValue = "all",
) -> list[PlayerStatsOut]:
    period = parse_period(year, month)

    # only completed games with at least one event take part
    events = fetch_club_events(db, club_id, period)
    if not events:
        logger.info("player stats club=%s period=%s/%s: no games with events", club_id, year, month)
        return []

    game_ids = list(dict.fromkeys(ev.game_id for ev in events))
    participants = fetch_confirmed_participants(db, game_ids)

    formation_by_game = fetch_active_formations(db, game_ids)
    assignments = fetch_team_assignments(db, formation_by_game.values())
    member_ids = {p.member_id for p in participants if _eligible(p)}
    fallback = fetch_latest_team_by_member(db, member_ids)

    out = build_player_stats(events, participants, TeamLookup.build(formation_by_game, assignments, fallback))
    logger.info(
        "player stats club=%s period=%s/%s: %d games, %d events -> %d players",
        club_id, year, month, len(game_ids), len(events), len(out),
    )
    return out
