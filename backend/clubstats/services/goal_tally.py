# clubstats/services/goal_tally.py
"""Scoreline of a single game, rebuilt from its event log.

A goal adds 1 to the scorer's team. An own-goal splits one goal between every
other team of the game (1/(n-1) each). Credit is summed exactly over the whole
game and each team's total is rounded once at the end (half up), so a 3-team
game never loses or gains goals to per-event rounding.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Iterable, Optional

from clubstats.core.periods import round_int
from clubstats.models.games import EVENT_GOAL, EVENT_OWN_GOAL
from clubstats.schemas.records import EventRecord

WIN = "win"
DRAW = "draw"
LOSS = "loss"

POINTS_BY_RESULT = {WIN: 3, DRAW: 1, LOSS: 0}


@dataclass
class GameTally:
    game_id: str
    teams: list[str] = field(default_factory=list)  # first-appearance order
    credit: dict[str, Fraction] = field(default_factory=dict)
    goals: dict[str, int] = field(default_factory=dict)  # rounded totals

    def goals_for(self, team: str) -> int:
        return self.goals.get(team, 0)

    def opponents(self, team: str) -> list[str]:
        return [t for t in self.teams if t != team]

    def conceded_by(self, team: str) -> int:
        return sum(self.goals[t] for t in self.opponents(team))

    def best_opponent_goals(self, team: str) -> int:
        # no opposing team on the sheet: measure against zero
        return max((self.goals[t] for t in self.opponents(team)), default=0)

    def result_for(self, team: str) -> str:
        own = self.goals_for(team)
        best = self.best_opponent_goals(team)
        if own > best:
            return WIN
        if own == best:
            return DRAW
        return LOSS


def tally_game(events: Iterable[EventRecord], game_id: Optional[str] = None) -> GameTally:
    events = list(events)
    gid = game_id if game_id is not None else (events[0].game_id if events else "")

    teams: list[str] = []
    for ev in events:
        if ev.team not in teams:
            teams.append(ev.team)

    credit: dict[str, Fraction] = {t: Fraction(0) for t in teams}
    for ev in events:
        if ev.event_type == EVENT_GOAL:
            credit[ev.team] += 1
        elif ev.event_type == EVENT_OWN_GOAL:
            others = [t for t in teams if t != ev.team]
            if not others:
                continue
            share = Fraction(1, len(others))
            for t in others:
                credit[t] += share

    goals = {t: round_int(c) for t, c in credit.items()}
    return GameTally(game_id=gid, teams=teams, credit=credit, goals=goals)


def group_events_by_game(events: Iterable[EventRecord]) -> dict[str, list[EventRecord]]:
    by_game: dict[str, list[EventRecord]] = defaultdict(list)
    for ev in events:
        by_game[ev.game_id].append(ev)
    return dict(by_game)


def tally_games(events: Iterable[EventRecord]) -> dict[str, GameTally]:
    return {gid: tally_game(evs, gid) for gid, evs in group_events_by_game(events).items()}
