from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from clubstats.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from clubstats.models.games import GameParticipant
from clubstats.models.highlights import GameHighlight, GameHighlightVote, GameVotingControl
from clubstats.services import highlight_voting as voting


@pytest.fixture
def game(club):
    club.member("ana", birth_date=date(1990, 1, 1))
    club.member("bia", birth_date=date(1985, 5, 5))
    club.member("caio")
    club.member("duda")
    club.member("edu")
    club.game("g1", date(2025, 3, 1), confirmed=["ana", "bia", "caio", "duda"], declined=["edu"])
    return "g1"


def counts(db, game_id):
    return {h.member_id: h.votes_count for h in db.query(GameHighlight).filter_by(game_id=game_id)}


def test_initialize_creates_one_highlight_per_confirmed_participant(db, game):
    assert voting.initialize_highlights(db, game) == 4
    assert counts(db, game) == {"ana": 0, "bia": 0, "caio": 0, "duda": 0}

    # idempotent
    assert voting.initialize_highlights(db, game) == 0
    assert db.query(GameHighlight).count() == 4


def test_initialize_with_explicit_ids_keeps_only_confirmed(db, game):
    assert voting.initialize_highlights(db, game, ["ana", "edu", "ghost"]) == 1
    assert set(counts(db, game)) == {"ana"}


def test_initialize_unknown_game(db, club):
    with pytest.raises(NotFoundError):
        voting.initialize_highlights(db, "nope")


def test_vote_creates_highlights_lazily_and_counts(db, game):
    vote = voting.vote_for_member(db, game, "ana", "bia")

    assert vote.voter_id == "ana"
    assert vote.voted_for == "bia"
    assert counts(db, game) == {"ana": 0, "bia": 1, "caio": 0, "duda": 0}
    assert voting.has_voted(db, game, "ana") is True
    assert voting.has_voted(db, game, "bia") is False


def test_second_vote_from_same_member_conflicts(db, game):
    voting.vote_for_member(db, game, "ana", "bia")

    with pytest.raises(ConflictError):
        voting.vote_for_member(db, game, "ana", "caio")

    assert db.query(GameHighlightVote).count() == 1
    assert counts(db, game)["caio"] == 0


@pytest.mark.parametrize(
    "voter, target",
    [
        ("ana", "ana"),  # self
        ("ana", "edu"),  # declined
        ("edu", "ana"),  # voter declined
        ("ana", "ghost"),
    ],
)
def test_invalid_votes_are_rejected(db, game, voter, target):
    with pytest.raises(ValidationError):
        voting.vote_for_member(db, game, voter, target)
    assert db.query(GameHighlightVote).count() == 0


def test_finalize_picks_most_voted(db, game):
    voting.vote_for_member(db, game, "ana", "caio")
    voting.vote_for_member(db, game, "bia", "caio")
    voting.vote_for_member(db, game, "caio", "ana")

    winner = voting.finalize_voting(db, game)

    assert winner.member_id == "caio"
    assert winner.votes_count == 2
    assert winner.is_winner is True

    winners = db.query(GameHighlight).filter_by(game_id=game, is_winner=True).all()
    assert [h.member_id for h in winners] == ["caio"]

    ctl = db.query(GameVotingControl).filter_by(game_id=game).one()
    assert ctl.is_finalized is True
    assert ctl.winner_member_id == "caio"
    assert ctl.finalized_at is not None


def test_tie_goes_to_the_oldest_member(db, game):
    voting.vote_for_member(db, game, "caio", "ana")
    voting.vote_for_member(db, game, "duda", "bia")

    winner = voting.finalize_voting(db, game)

    # bia (1985) is older than ana (1990)
    assert winner.member_id == "bia"


def test_tie_with_unknown_birth_date_loses(db, game):
    voting.vote_for_member(db, game, "ana", "caio")
    voting.vote_for_member(db, game, "bia", "duda")
    voting.vote_for_member(db, game, "caio", "ana")

    winner = voting.finalize_voting(db, game)

    assert winner.member_id == "ana"


def test_finalize_without_votes_has_no_winner(db, game):
    voting.initialize_highlights(db, game)

    assert voting.finalize_voting(db, game) is None

    status = voting.get_voting_status(db, game)
    assert status.is_finalized is True
    assert status.winner is None
    assert not any(h.is_winner for h in status.highlights)


def test_finalize_twice_is_a_state_error(db, game):
    voting.vote_for_member(db, game, "ana", "bia")
    voting.finalize_voting(db, game)

    with pytest.raises(StateError):
        voting.finalize_voting(db, game)


def test_no_vote_after_finalize(db, game):
    voting.vote_for_member(db, game, "ana", "bia")
    voting.finalize_voting(db, game)

    with pytest.raises(StateError):
        voting.vote_for_member(db, game, "caio", "bia")

    assert db.query(GameHighlightVote).count() == 1


def test_finalize_reopen_finalize_keeps_votes(db, game):
    voting.vote_for_member(db, game, "bia", "ana")
    assert voting.finalize_voting(db, game).member_id == "ana"

    voting.reopen_voting(db, game)

    status = voting.get_voting_status(db, game)
    assert status.is_finalized is False
    assert status.finalized_at is None
    assert status.winner is None
    assert not any(h.is_winner for h in status.highlights)
    assert [(v.voter_id, v.voted_for) for v in status.votes] == [("bia", "ana")]

    # the earlier vote still counts
    assert voting.finalize_voting(db, game).member_id == "ana"


def test_reopen_allows_remaining_voters(db, game):
    voting.vote_for_member(db, game, "bia", "ana")
    voting.finalize_voting(db, game)
    voting.reopen_voting(db, game)

    voting.vote_for_member(db, game, "caio", "duda")
    voting.vote_for_member(db, game, "ana", "duda")

    assert voting.finalize_voting(db, game).member_id == "duda"


def test_reopen_when_not_finalized(db, game):
    with pytest.raises(StateError):
        voting.reopen_voting(db, game)

    voting.vote_for_member(db, game, "ana", "bia")
    with pytest.raises(StateError):
        voting.reopen_voting(db, game)


def test_reopen_adds_highlights_for_late_confirmations(db, game):
    voting.vote_for_member(db, game, "ana", "bia")
    voting.finalize_voting(db, game)
    # edu changes their answer after the first round
    db.query(GameParticipant).filter_by(game_id=game, member_id="edu").update({"status": "confirmed"})
    db.commit()

    voting.reopen_voting(db, game)

    assert counts(db, game)["edu"] == 0
    voting.vote_for_member(db, game, "edu", "bia")
    assert counts(db, game)["bia"] == 2


def test_delete_resets_the_game(db, game):
    voting.vote_for_member(db, game, "ana", "bia")
    voting.vote_for_member(db, game, "caio", "bia")
    voting.finalize_voting(db, game)

    removed = voting.delete_voting(db, game)

    assert removed == {"votes": 2, "highlights": 4, "controls": 1}
    assert db.query(GameHighlight).count() == 0
    assert db.query(GameVotingControl).count() == 0

    # back to an empty open game
    voting.vote_for_member(db, game, "ana", "caio")
    assert counts(db, game)["caio"] == 1


def test_votes_count_matches_vote_rows_after_finalize(db, game):
    voting.vote_for_member(db, game, "ana", "bia")
    voting.vote_for_member(db, game, "caio", "bia")
    # counter out of sync with the vote rows
    db.query(GameHighlight).filter_by(game_id=game, member_id="bia").update({"votes_count": 7})
    db.commit()

    winner = voting.finalize_voting(db, game)

    assert winner.votes_count == 2
    assert counts(db, game)["bia"] == 2


def test_highlights_for_games(db, club, game):
    club.member("fabi")
    club.game("g2", date(2025, 3, 8), confirmed=["fabi", "ana"])
    voting.initialize_highlights(db, game)
    voting.initialize_highlights(db, "g2")

    out = voting.get_highlights_for_games(db, [game, "g2", game])

    assert len(out) == 6
    assert {h.game_id for h in out} == {"g1", "g2"}
    assert voting.get_highlights_for_games(db, []) == []


def test_pick_winner_ignores_zero_votes():
    assert voting.pick_winner([]) is None


@pytest.fixture
def other_session(engine):
    """A second request on the same database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


def test_vote_rejected_when_finalized_between_checks(db, game, other_session, monkeypatch):
    voting.vote_for_member(db, game, "ana", "bia")

    ensure = voting._ensure_highlights

    def ensure_then_finalize_elsewhere(session, game_id, member_ids):
        created = ensure(session, game_id, member_ids)
        voting.finalize_voting(other_session, game_id)
        return created

    monkeypatch.setattr(voting, "_ensure_highlights", ensure_then_finalize_elsewhere)

    with pytest.raises(StateError):
        voting.vote_for_member(db, game, "caio", "bia")

    assert db.query(GameHighlightVote).count() == 1
    assert counts(db, game)["bia"] == 1
    assert db.query(GameVotingControl).filter_by(game_id=game).one().winner_member_id == "bia"


def test_concurrent_finalize_creating_the_control_row_conflicts(db, game, other_session, monkeypatch):
    voting.initialize_highlights(db, game)

    get_control = voting.store.get_control

    def read_then_lose_the_race(session, game_id, for_update=False):
        ctl = get_control(session, game_id, for_update=for_update)
        if ctl is None and session is db:
            other_session.add(GameVotingControl(game_id=game_id, is_finalized=True))
            other_session.commit()
        return ctl

    monkeypatch.setattr(voting.store, "get_control", read_then_lose_the_race)

    with pytest.raises(ConflictError):
        voting.finalize_voting(db, game)

    assert db.query(GameVotingControl).filter_by(game_id=game).count() == 1
