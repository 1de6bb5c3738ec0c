# clubstats/services/highlight_voting.py
"""
"Player of the match" voting for one game.

States:
- OPEN: no control row, or control row with is_finalized=False
- FINALIZED: control row with is_finalized=True (winner flagged, if any vote)

Transitions:
- vote:      OPEN -> OPEN          (one vote per voter, unique in the store)
- finalize:  OPEN -> FINALIZED     (row lock on the control row)
- reopen:    FINALIZED -> OPEN     (votes kept, winner cleared)
- delete:    any -> empty OPEN     (votes, highlights and control removed)
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.errors import ConflictError, StateError, ValidationError
from clubstats.crud import crud_highlights as store
from clubstats.crud.base import commit
from clubstats.schemas.highlights import HighlightMemberOut, HighlightOut, VoteOut, VotingStatusOut
from clubstats.schemas.records import HighlightRecord, VoteRecord

logger = get_logger(__name__)


def highlight_out(h: HighlightRecord) -> HighlightOut:
    return HighlightOut(
        id=h.id,
        game_id=h.game_id,
        member_id=h.member_id,
        votes_count=h.votes_count,
        is_winner=h.is_winner,
        member=HighlightMemberOut(
            name=h.member_name,
            nickname=h.member_nickname,
            photo_url=h.member_photo_url,
            birth_date=h.member_birth_date,
        ),
    )


def vote_out(v: VoteRecord) -> VoteOut:
    return VoteOut(id=v.id, game_id=v.game_id, voter_id=v.voter_id, voted_for=v.voted_for, created_at=v.created_at)


def pick_winner(highlights: Iterable[HighlightRecord]) -> Optional[HighlightRecord]:
    """
    Most votes wins. Ties go to the oldest member (earliest birth date);
    members without a birth date come after everyone who has one; member_id
    settles anything left so the pick never depends on row order.
    No votes at all -> no winner.
    """
    candidates = list(highlights)
    if not candidates:
        return None

    top = max(h.votes_count for h in candidates)
    if top <= 0:
        return None

    tied = [h for h in candidates if h.votes_count == top]

    def tie_key(h: HighlightRecord):
        born = h.member_birth_date
        return (born is None, born or date.max, h.member_id)

    return sorted(tied, key=tie_key)[0]


def _ensure_highlights(db: Session, game_id: str, member_ids: Iterable[str]) -> int:
    try:
        return store.insert_missing_highlights(db, game_id, member_ids)
    except ConflictError:
        # a concurrent initializer won the unique constraint; its rows are as good as ours
        logger.info("game %s: highlights initialized concurrently", game_id)
        return 0


def _lock_control(db: Session, game_id: str):
    """Control row of the game, locked for this transaction (created OPEN if missing)."""
    ctl = store.get_control(db, game_id, for_update=True)
    if ctl is None:
        try:
            ctl = store.create_control(db, game_id)
        except ConflictError:
            # created by a concurrent request: wait on its lock instead
            ctl = store.get_control(db, game_id, for_update=True)
    return ctl


def initialize_highlights(
    db: Session,
    game_id: str,
    participant_ids: Optional[Iterable[str]] = None,
) -> int:
    """Ensure one zero-vote highlight per confirmed participant. Safe to call repeatedly."""
    store.get_game(db, game_id)

    confirmed = store.get_confirmed_participant_ids(db, game_id)
    if participant_ids is None:
        ids = confirmed
    else:
        requested = list(participant_ids)
        allowed = set(confirmed)
        ids = [mid for mid in requested if mid in allowed]
        skipped = set(requested) - allowed
        if skipped:
            logger.warning("game %s: ignoring %d non-confirmed participant(s) on init", game_id, len(skipped))

    if not ids:
        return 0

    created = _ensure_highlights(db, game_id, ids)
    if created:
        commit(db)
        logger.info("game %s: initialized %d highlight(s)", game_id, created)
    return created


def vote_for_member(db: Session, game_id: str, voter_id: str, voted_for_id: str) -> VoteOut:
    store.get_game(db, game_id)

    ctl = store.get_control(db, game_id)
    if ctl is not None and ctl.is_finalized:
        raise StateError("Voting for this game is already finalized")

    if voter_id == voted_for_id:
        raise ValidationError("Members cannot vote for themselves")

    confirmed = set(store.get_confirmed_participant_ids(db, game_id))
    if voted_for_id not in confirmed:
        raise ValidationError("Vote target is not a confirmed participant of this game")
    if voter_id not in confirmed:
        raise ValidationError("Only confirmed participants can vote in this game")

    # highlights are created lazily the first time voting opens
    if _ensure_highlights(db, game_id, sorted(confirmed)):
        commit(db)

    # re-check under the per-game lock so no vote lands after a finalize
    ctl = _lock_control(db, game_id)
    if ctl.is_finalized:
        db.rollback()
        raise StateError("Voting for this game is already finalized")

    vote = store.insert_vote(db, game_id, voter_id, voted_for_id)
    store.increment_votes(db, game_id, voted_for_id)
    commit(db)

    logger.info("game %s: vote from %s for %s", game_id, voter_id, voted_for_id)
    return vote_out(vote)


def finalize_voting(db: Session, game_id: str) -> Optional[HighlightOut]:
    """Lock the game, elect the winner and flip to FINALIZED. Returns the winner (None without votes)."""
    store.get_game(db, game_id)

    ctl = store.get_control(db, game_id, for_update=True)
    if ctl is None:
        ctl = store.create_control(db, game_id)
    elif ctl.is_finalized:
        raise StateError("Voting for this game is already finalized")

    # votes_count always mirrors the vote table
    store.set_votes_counts(db, game_id, store.count_votes_by_member(db, game_id))

    winner = pick_winner(store.list_highlights(db, game_id))
    winner_id = winner.member_id if winner else None
    store.set_winner(db, game_id, winner_id)

    now = datetime.utcnow()
    ctl.is_finalized = True
    ctl.finalized_at = now
    ctl.winner_member_id = winner_id
    ctl.updated_at = now
    commit(db)

    logger.info("game %s: voting finalized, winner=%s", game_id, winner_id)
    if winner is None:
        return None
    return highlight_out(winner.model_copy(update={"is_winner": True}))


def reopen_voting(db: Session, game_id: str) -> None:
    """FINALIZED -> OPEN. Existing votes stay; members who have not voted yet can still vote."""
    store.get_game(db, game_id)

    ctl = store.get_control(db, game_id, for_update=True)
    if ctl is None or not ctl.is_finalized:
        raise StateError("Voting for this game is not finalized")

    ctl.is_finalized = False
    ctl.finalized_at = None
    ctl.winner_member_id = None
    ctl.updated_at = datetime.utcnow()
    store.set_winner(db, game_id, None)
    commit(db)

    logger.info("game %s: voting reopened", game_id)

    # members confirmed after the first round of voting can be voted for too
    if _ensure_highlights(db, game_id, store.get_confirmed_participant_ids(db, game_id)):
        commit(db)


def delete_voting(db: Session, game_id: str) -> dict:
    store.get_game(db, game_id)

    removed = store.delete_game_voting(db, game_id)
    commit(db)

    logger.info(
        "game %s: voting deleted (%d votes, %d highlights)",
        game_id, removed["votes"], removed["highlights"],
    )
    return removed


def has_voted(db: Session, game_id: str, voter_id: str) -> bool:
    store.get_game(db, game_id)
    return store.has_vote(db, game_id, voter_id)


def get_voting_status(db: Session, game_id: str) -> VotingStatusOut:
    store.get_game(db, game_id)

    ctl = store.get_control(db, game_id)
    highlights = [highlight_out(h) for h in store.list_highlights(db, game_id)]
    votes = [vote_out(v) for v in store.list_votes(db, game_id)]

    is_finalized = bool(ctl and ctl.is_finalized)
    winner = next((h for h in highlights if h.is_winner), None) if is_finalized else None

    return VotingStatusOut(
        game_id=game_id,
        is_finalized=is_finalized,
        finalized_at=ctl.finalized_at if is_finalized else None,
        winner=winner,
        highlights=highlights,
        votes=votes,
    )


def get_highlights_for_games(db: Session, game_ids: Iterable[str]) -> list[HighlightOut]:
    ids = list(dict.fromkeys(game_ids))
    if not ids:
        return []
    return [highlight_out(h) for h in store.list_highlights_for_games(db, ids)]
