from datetime import date

import pytest

from clubstats.services.player_stats import compute_player_stats, player_points


def by_id(rows):
    return {r.id: r for r in rows}


def test_points_formula():
    # 4 games, 3 goals, 1 own-goal, 2 wins, 1 draw, 5 saves
    assert player_points(4, 3, 1, 2, 1, 5) == pytest.approx(4 + 3 - 1 + 6 + 1 + 1.0)
    assert player_points(0, 0, 0, 0, 0, 0) == 0


def test_results_follow_the_game_formation(db, club):
    club.member("ana", nickname="Aninha")
    club.member("bia")
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia"])
    club.formation("g1", {"ana": "A", "bia": "B"})
    club.event("g1", "A", member_id="ana", times=2)
    club.event("g1", "B", "own-goal", member_id="bia")
    club.event("g1", "B", "save", member_id="bia")

    rows = by_id(compute_player_stats(db, club.club.id, 2025))

    ana, bia = rows["ana"], rows["bia"]
    assert (ana.games, ana.goals, ana.wins, ana.losses) == (1, 2, 1, 0)
    assert ana.points == pytest.approx(1 + 2 + 3)
    assert ana.name == "Aninha"
    assert ana.goal_average == 2
    assert ana.win_rate == "100%"

    assert (bia.games, bia.own_goals, bia.saves, bia.losses) == (1, 1, 1, 1)
    assert bia.points == pytest.approx(1 - 1 + 0.2)
    assert bia.name == "Bia"

    assert [ana.position, bia.position] == [1, 2]


def test_falls_back_to_latest_known_team(db, club):
    club.member("ana")
    club.member("bia")
    club.game("g0", date(2025, 2, 1), confirmed=["ana", "bia"])
    club.formation("g0", {"ana": "B", "bia": "A"})
    club.event("g0", "A")
    club.event("g0", "B")
    # second game has no formation
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia"])
    club.event("g1", "B", times=2)
    club.event("g1", "A")

    rows = by_id(compute_player_stats(db, club.club.id, 2025, 3))

    assert rows["ana"].wins == 1
    assert rows["bia"].losses == 1


def test_inactive_formation_is_ignored(db, club):
    club.member("ana")
    club.game("g0", date(2025, 2, 1), confirmed=["ana"])
    club.formation("g0", {"ana": "A"})
    club.event("g0", "A")
    club.game("g1", date(2025, 3, 1), confirmed=["ana"])
    club.formation("g1", {"ana": "B"}, is_active=False)
    club.event("g1", "A")
    club.event("g1", "B", "save")

    ana = by_id(compute_player_stats(db, club.club.id, 2025, 3))["ana"]

    # falls back to the most recent assignment, which is the inactive one on g1
    assert ana.losses == 1


def test_player_without_any_team_counts_the_game_only(db, club):
    club.member("ana")
    club.game("g1", date(2025, 3, 1), confirmed=["ana"])
    club.event("g1", "A")
    club.event("g1", "B")

    ana = by_id(compute_player_stats(db, club.club.id, 2025))["ana"]

    assert ana.games == 1
    assert (ana.wins, ana.draws, ana.losses) == (0, 0, 0)
    assert ana.points == pytest.approx(1)


def test_excludes_declined_inactive_and_games_without_events(db, club):
    club.member("ana")
    club.member("bia")
    club.member("caio", status="Inactive")
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "caio"], declined=["bia"])
    club.formation("g1", {"ana": "A", "bia": "B", "caio": "B"})
    club.event("g1", "A", member_id="ana")
    club.game("g-empty", date(2025, 3, 8), confirmed=["ana", "bia"])
    club.game("g-canceled", date(2025, 3, 9), status="canceled", confirmed=["ana", "bia"])
    club.event("g-canceled", "B", member_id="bia")

    rows = by_id(compute_player_stats(db, club.club.id, 2025))

    assert set(rows) == {"ana"}
    assert rows["ana"].games == 1


def test_empty_period_returns_empty_list(db, club):
    club.member("ana")
    club.game("g1", date(2024, 3, 1), confirmed=["ana"])
    club.event("g1", "A")

    assert compute_player_stats(db, club.club.id, 2025) == []


def test_positions_follow_points(db, club):
    for mid in ("ana", "bia", "caio"):
        club.member(mid)
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia", "caio"])
    club.formation("g1", {"ana": "A", "bia": "B", "caio": "B"})
    club.event("g1", "B", member_id="caio", times=3)
    club.event("g1", "A", member_id="ana")

    rows = compute_player_stats(db, club.club.id, 2025)

    assert [r.id for r in rows] == ["caio", "bia", "ana"]
    assert [r.position for r in rows] == [1, 2, 3]
