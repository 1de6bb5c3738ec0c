# clubstats/crud/crud_highlights.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubstats.core.errors import ConflictError, NotFoundError
from clubstats.crud.base import chunked, store_call
from clubstats.models.games import PARTICIPANT_CONFIRMED, Game, GameParticipant
from clubstats.models.highlights import GameHighlight, GameHighlightVote, GameVotingControl
from clubstats.models.members import Member
from clubstats.schemas.records import GameRecord, HighlightRecord, VoteRecord


def _highlight_record(h: GameHighlight, m: Optional[Member]) -> HighlightRecord:
    return HighlightRecord(
        id=h.id,
        game_id=h.game_id,
        member_id=h.member_id,
        votes_count=int(h.votes_count or 0),
        is_winner=bool(h.is_winner),
        member_name=m.name if m else None,
        member_nickname=m.nickname if m else None,
        member_photo_url=m.photo_url if m else None,
        member_birth_date=m.birth_date if m else None,
    )


@store_call
def get_game(db: Session, game_id: str) -> GameRecord:
    g = db.query(Game).filter(Game.id == game_id).first()
    if not g:
        raise NotFoundError(f"Game {game_id} not found")
    return GameRecord.model_validate(g)


@store_call
def get_confirmed_participant_ids(db: Session, game_id: str) -> list[str]:
    rows = (
        db.query(GameParticipant.member_id)
        .filter(GameParticipant.game_id == game_id, GameParticipant.status == PARTICIPANT_CONFIRMED)
        .order_by(GameParticipant.member_id.asc())
        .all()
    )
    return [mid for (mid,) in rows]


@store_call
def list_highlights(db: Session, game_id: str) -> list[HighlightRecord]:
    rows = (
        db.query(GameHighlight, Member)
        .outerjoin(Member, Member.id == GameHighlight.member_id)
        .filter(GameHighlight.game_id == game_id)
        .order_by(GameHighlight.votes_count.desc(), Member.name.asc(), GameHighlight.member_id.asc())
        .all()
    )
    return [_highlight_record(h, m) for h, m in rows]


@store_call
def list_highlights_for_games(db: Session, game_ids: Iterable[str]) -> list[HighlightRecord]:
    out: list[HighlightRecord] = []
    for batch in chunked(game_ids):
        rows = (
            db.query(GameHighlight, Member)
            .outerjoin(Member, Member.id == GameHighlight.member_id)
            .filter(GameHighlight.game_id.in_(batch))
            .order_by(GameHighlight.game_id.asc(), GameHighlight.votes_count.desc(), GameHighlight.member_id.asc())
            .all()
        )
        out.extend(_highlight_record(h, m) for h, m in rows)
    return out


@store_call
def list_winning_highlights(db: Session, game_ids: Iterable[str]) -> list[HighlightRecord]:
    out: list[HighlightRecord] = []
    for batch in chunked(game_ids):
        rows = (
            db.query(GameHighlight, Member)
            .join(Member, Member.id == GameHighlight.member_id)
            .filter(GameHighlight.game_id.in_(batch), GameHighlight.is_winner == True)  # noqa: E712
            .all()
        )
        out.extend(_highlight_record(h, m) for h, m in rows)
    return out


@store_call
def insert_missing_highlights(db: Session, game_id: str, member_ids: Iterable[str]) -> int:
    """Adds a zero-vote highlight for every member that has none yet. Flushes, does not commit."""
    existing = {
        mid
        for (mid,) in db.query(GameHighlight.member_id).filter(GameHighlight.game_id == game_id).all()
    }
    created = 0
    for mid in dict.fromkeys(member_ids):
        if mid in existing:
            continue
        db.add(GameHighlight(game_id=game_id, member_id=mid, votes_count=0, is_winner=False))
        created += 1
    if created:
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Highlights for game {game_id} were initialized concurrently")
    return created


@store_call
def get_control(db: Session, game_id: str, for_update: bool = False) -> Optional[GameVotingControl]:
    q = db.query(GameVotingControl).filter(GameVotingControl.game_id == game_id)
    if for_update:
        # per-game lock (no-op on SQLite); refresh a row the session already holds
        q = q.with_for_update().populate_existing()
    return q.first()


@store_call
def create_control(db: Session, game_id: str) -> GameVotingControl:
    ctl = GameVotingControl(game_id=game_id, is_finalized=False)
    db.add(ctl)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Voting control for game {game_id} was created concurrently")
    return ctl


@store_call
def insert_vote(db: Session, game_id: str, voter_id: str, voted_for: str) -> VoteRecord:
    vote = GameHighlightVote(game_id=game_id, voter_id=voter_id, voted_for=voted_for)
    db.add(vote)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("This member already voted in this game")
    return VoteRecord.model_validate(vote)


@store_call
def increment_votes(db: Session, game_id: str, member_id: str) -> int:
    # votes_count + 1 evaluated by the database, not read-modify-write
    return (
        db.query(GameHighlight)
        .filter(GameHighlight.game_id == game_id, GameHighlight.member_id == member_id)
        .update(
            {
                GameHighlight.votes_count: GameHighlight.votes_count + 1,
                GameHighlight.updated_at: datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )


@store_call
def count_votes_by_member(db: Session, game_id: str) -> dict[str, int]:
    rows = (
        db.query(GameHighlightVote.voted_for, func.count(GameHighlightVote.id))
        .filter(GameHighlightVote.game_id == game_id)
        .group_by(GameHighlightVote.voted_for)
        .all()
    )
    return {mid: int(n) for mid, n in rows}


@store_call
def set_votes_counts(db: Session, game_id: str, counts: dict[str, int]) -> int:
    changed = 0
    rows = db.query(GameHighlight).filter(GameHighlight.game_id == game_id).all()
    for h in rows:
        n = int(counts.get(h.member_id, 0))
        if h.votes_count != n:
            h.votes_count = n
            changed += 1
    db.flush()
    return changed


@store_call
def set_winner(db: Session, game_id: str, member_id: Optional[str]) -> None:
    """Exactly one highlight flagged (or none when member_id is None)."""
    rows = db.query(GameHighlight).filter(GameHighlight.game_id == game_id).all()
    for h in rows:
        h.is_winner = member_id is not None and h.member_id == member_id
    db.flush()


@store_call
def list_votes(db: Session, game_id: str) -> list[VoteRecord]:
    rows = (
        db.query(GameHighlightVote)
        .filter(GameHighlightVote.game_id == game_id)
        .order_by(GameHighlightVote.created_at.asc(), GameHighlightVote.id.asc())
        .all()
    )
    return [VoteRecord.model_validate(r) for r in rows]


@store_call
def has_vote(db: Session, game_id: str, voter_id: str) -> bool:
    return (
        db.query(GameHighlightVote.id)
        .filter(GameHighlightVote.game_id == game_id, GameHighlightVote.voter_id == voter_id)
        .first()
        is not None
    )


@store_call
def delete_game_voting(db: Session, game_id: str) -> dict:
    votes = (
        db.query(GameHighlightVote)
        .filter(GameHighlightVote.game_id == game_id)
        .delete(synchronize_session=False)
    )
    highlights = (
        db.query(GameHighlight)
        .filter(GameHighlight.game_id == game_id)
        .delete(synchronize_session=False)
    )
    controls = (
        db.query(GameVotingControl)
        .filter(GameVotingControl.game_id == game_id)
        .delete(synchronize_session=False)
    )
    return {"votes": votes, "highlights": highlights, "controls": controls}


@store_call
def finalized_game_ids(db: Session, game_ids: Iterable[str]) -> list[str]:
    out: list[str] = []
    for batch in chunked(game_ids):
        rows = (
            db.query(GameVotingControl.game_id)
            .filter(GameVotingControl.game_id.in_(batch), GameVotingControl.is_finalized == True)  # noqa: E712
            .all()
        )
        out.extend(gid for (gid,) in rows)
    return out
