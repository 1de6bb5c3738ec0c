# clubstats/services/top_highlights.py
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from clubstats.core.config import settings
from clubstats.core.periods import PeriodValue, year_window
from clubstats.crud.crud_highlights import finalized_game_ids, list_winning_highlights
from clubstats.crud.crud_stats import fetch_games
from clubstats.schemas.stats import TopHighlightOut


def compute_top_highlights(
    db: Session,
    club_id: str,
    year: PeriodValue = "all",
    limit: Optional[int] = None,
    today: Optional[date] = None,
) -> list[TopHighlightOut]:
    """Members elected "player of the match" most often in finalized games of the year."""
    period = year_window(year, today)
    limit = settings.TOP_HIGHLIGHTS_LIMIT if limit is None else limit

    games = fetch_games(db, club_id, period, statuses=None)
    finalized = finalized_game_ids(db, [g.id for g in games])
    if not finalized:
        return []

    counts: dict[str, TopHighlightOut] = {}
    for h in list_winning_highlights(db, finalized):
        row = counts.get(h.member_id)
        if row is None:
            row = counts[h.member_id] = TopHighlightOut(
                id=h.member_id,
                name=h.member_name or h.member_id,
                nickname=h.member_nickname,
                highlight_count=0,
                position=0,
            )
        row.highlight_count += 1

    out = sorted(counts.values(), key=lambda r: (-r.highlight_count, r.name, r.id))[:limit]
    for i, row in enumerate(out, start=1):
        row.position = i
    return out
