# clubstats/services/participation_ranking.py
"""Composite participation score.

    participation_value = round(participation_rate * 1000)
    membership_value    = round(membership_years * 100)
    score               = (participation_value + membership_value + age) / 1000

The rate is rounded to one decimal before being weighted, and every rounding
is half-up, so the score matches what members see on the club dashboard.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from fractions import Fraction
from math import floor
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.periods import PeriodValue, days_between, parse_period, round_half_up, round_int
from clubstats.crud.crud_stats import fetch_active_members, fetch_confirmed_participants, fetch_games
from clubstats.schemas.records import GameRecord, MemberRecord, ParticipantRecord
from clubstats.schemas.stats import ParticipationRankingOut

logger = get_logger(__name__)

DAYS_PER_YEAR = Decimal("365.25")


def _rate(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return Decimal("0.0")
    return round_half_up(Fraction(part * 100, whole), 1)


def membership_years(reference: date, registration: Optional[date]) -> Decimal:
    if registration is None:
        return Decimal(0)
    days = days_between(reference, registration)
    if days <= 0:
        return Decimal(0)
    return Decimal(days) / DAYS_PER_YEAR


def age_at(reference: date, birth: Optional[date]) -> int:
    if birth is None:
        return 0
    years = floor(Decimal(days_between(reference, birth)) / DAYS_PER_YEAR)
    return max(0, int(years))


def participation_score(participation_rate: Decimal, years: Decimal, age: int) -> Decimal:
    participation_value = round_int(participation_rate * 1000)
    membership_value = round_int(years * 100)
    return round_half_up(Decimal(participation_value + membership_value + age) / Decimal(1000), 2)


def build_participation_ranking(
    members: Iterable[MemberRecord],
    games: Iterable[GameRecord],
    confirmed: Iterable[ParticipantRecord],
    reference: date,
) -> list[ParticipationRankingOut]:
    """Ranking from already-fetched rows. Pure."""
    games = list(games)
    game_ids = {g.id for g in games}
    total_games = len(games)

    games_by_member: dict[str, int] = {}
    for p in confirmed:
        if p.game_id in game_ids:
            games_by_member[p.member_id] = games_by_member.get(p.member_id, 0) + 1

    out: list[ParticipationRankingOut] = []
    for m in members:
        played = games_by_member.get(m.id, 0)

        if m.registration_date is None:
            since_registration = total_games
        else:
            since_registration = sum(1 for g in games if g.date >= m.registration_date)

        rate = _rate(played, total_games)
        effective = _rate(played, since_registration)

        membership_days = max(0, days_between(reference, m.registration_date)) if m.registration_date else 0
        years = membership_years(reference, m.registration_date)
        age = age_at(reference, m.birth_date)

        score = participation_score(rate, years, age)

        out.append(
            ParticipationRankingOut(
                id=m.id,
                name=m.name,
                nickname=m.nickname or m.name,
                points=float(score),
                games=played,
                membership_time=membership_days,
                membership_years=float(round_half_up(years, 3)),
                age=age,
                position=0,
                participation_rate=float(rate),
                effective_participation_rate=float(effective),
            )
        )

    # stable: equal scores keep member order
    out = sorted(out, key=lambda r: r.points, reverse=True)
    for i, row in enumerate(out, start=1):
        row.position = i
    return out


def compute_participation_ranking(
    db: Session,
    club_id: str,
    year: PeriodValue = "all",
    month: PeriodValue = "all",
    today: Optional[date] = None,
) -> list[ParticipationRankingOut]:
    period = parse_period(year, month)
    reference = period.reference_date(today)

    members = fetch_active_members(db, club_id)
    if not members:
        logger.info("participation ranking club=%s: no active members", club_id)
        return []

    games = fetch_games(db, club_id, period)
    confirmed = fetch_confirmed_participants(db, [g.id for g in games]) if games else []

    out = build_participation_ranking(members, games, confirmed, reference)
    logger.info(
        "participation ranking club=%s period=%s/%s ref=%s: %d games, %d members",
        club_id, year, month, reference.isoformat(), len(games), len(out),
    )
    return out
