from datetime import date

import pytest

from clubstats.core.errors import NotFoundError
from clubstats.services import highlight_voting as voting
from clubstats.services.game_summary import (
    compute_completed_game_counts,
    compute_game_summary,
    get_game_participation_stats,
)
from clubstats.services.top_highlights import compute_top_highlights

TODAY = date(2025, 6, 30)


def test_summary_for_a_year(db, club):
    club.member("ana")
    club.member("bia")
    club.member("bot", status="System")
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia", "bot"])
    club.event("g1", "A", times=2)
    club.event("g1", "B", "own-goal")
    club.event("g1", "B", "save")
    club.game("g2", date(2025, 3, 8), confirmed=["ana"])
    club.game("g3", date(2025, 3, 15), status="canceled")
    club.game("g4", date(2025, 3, 22), status="scheduled")
    club.game("g-old", date(2024, 3, 1), confirmed=["ana"])

    out = compute_game_summary(db, club.club.id, 2025)

    # 3 goal events over the only game that had goals
    assert out.average_goals_per_game == 3.0
    # 3 confirmed humans over 2 completed games
    assert out.average_players_per_game == 1.5
    # 2 completed out of 2 completed + 1 canceled
    assert out.completion_rate == 66.67


def test_summary_defaults_to_current_year(db, club):
    club.game("g1", date(2025, 3, 1))
    club.game("g2", date(2024, 3, 1), status="cancelled")

    out = compute_game_summary(db, club.club.id, "all", today=TODAY)

    assert out.completion_rate == 100.0
    assert out.average_goals_per_game == 0


def test_summary_without_games(db, club):
    out = compute_game_summary(db, club.club.id, 2025)

    assert out.completion_rate == 0
    assert out.average_players_per_game == 0


def test_participation_of_one_game(db, club):
    club.member("ana")
    club.member("bia")
    club.member("caio")
    club.member("bot", status="System")
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia", "bot"], declined=["caio"])

    out = get_game_participation_stats(db, "g1")

    assert (out.confirmed, out.declined) == (2, 1)


def test_participation_of_unknown_game(db, club):
    with pytest.raises(NotFoundError):
        get_game_participation_stats(db, "nope")


def _finalized_game(club, db, game_id, day, winner, voters):
    club.game(game_id, day, confirmed=[winner, *voters])
    for voter in voters:
        voting.vote_for_member(db, game_id, voter, winner)
    voting.finalize_voting(db, game_id)


def test_top_highlights(db, club):
    club.member("ana", name="Ana")
    club.member("bia", name="Bia")
    club.member("caio", name="Caio")
    _finalized_game(club, db, "g1", date(2025, 3, 1), "bia", ["ana"])
    _finalized_game(club, db, "g2", date(2025, 3, 8), "bia", ["caio"])
    _finalized_game(club, db, "g3", date(2025, 3, 15), "caio", ["ana"])
    _finalized_game(club, db, "g4", date(2025, 3, 22), "ana", ["bia"])
    _finalized_game(club, db, "g-old", date(2024, 3, 22), "ana", ["bia"])

    # open game: its leader is not a winner yet
    club.game("g5", date(2025, 3, 29), confirmed=["ana", "caio"])
    voting.vote_for_member(db, "g5", "ana", "caio")

    rows = compute_top_highlights(db, club.club.id, 2025)

    assert [(r.id, r.highlight_count, r.position) for r in rows] == [
        ("bia", 2, 1),
        ("ana", 1, 2),
        ("caio", 1, 3),
    ]

    assert [r.id for r in compute_top_highlights(db, club.club.id, 2025, limit=1)] == ["bia"]


def test_top_highlights_ignores_reopened_games(db, club):
    club.member("ana")
    club.member("bia")
    _finalized_game(club, db, "g1", date(2025, 3, 1), "bia", ["ana"])
    voting.reopen_voting(db, "g1")

    assert compute_top_highlights(db, club.club.id, 2025) == []


def test_completed_game_counts(db, club):
    club.game("g1", date(2025, 6, 2))
    club.game("g2", date(2025, 6, 20))
    club.game("g3", date(2025, 5, 31))
    club.game("g4", date(2024, 6, 10))
    club.game("g5", date(2025, 6, 25), status="canceled")
    club.game("g6", date(2025, 6, 28), status="scheduled")

    out = compute_completed_game_counts(db, club.club.id, today=TODAY)

    assert (out.total, out.this_month) == (4, 2)
