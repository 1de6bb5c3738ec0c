from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clubstats.core.security import CurrentMember, get_current_member, require_admin
from clubstats.db.session import get_db
from clubstats.schemas.highlights import HasVotedOut, HighlightOut, VoteIn, VoteOut, VotingStatusOut
from clubstats.services import highlight_voting

router = APIRouter(prefix="/api/v1/games", tags=["highlights"])


class InitHighlightsIn(BaseModel):
    participant_ids: list[str] | None = None  # default: the game's confirmed participants


class InitHighlightsOut(BaseModel):
    game_id: str
    created: int


class FinalizeOut(BaseModel):
    game_id: str
    is_finalized: bool
    winner: HighlightOut | None = None


class DeleteVotingOut(BaseModel):
    game_id: str
    votes: int
    highlights: int


@router.get("/{game_id}/highlights", response_model=VotingStatusOut)
def voting_status(game_id: str, db: Session = Depends(get_db)):
    return highlight_voting.get_voting_status(db, game_id.strip())


@router.post("/{game_id}/highlights/init", response_model=InitHighlightsOut)
def init_highlights(
    game_id: str,
    payload: InitHighlightsIn | None = None,
    admin: CurrentMember = Depends(require_admin),
    db: Session = Depends(get_db),
):
    gid = game_id.strip()
    ids = payload.participant_ids if payload else None
    created = highlight_voting.initialize_highlights(db, gid, ids)
    return InitHighlightsOut(game_id=gid, created=created)


@router.post("/{game_id}/highlights/votes", response_model=VoteOut)
def vote(
    game_id: str,
    payload: VoteIn,
    member: CurrentMember = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    return highlight_voting.vote_for_member(db, game_id.strip(), member.member_id, payload.voted_for.strip())


@router.get("/{game_id}/highlights/votes/me", response_model=HasVotedOut)
def my_vote(
    game_id: str,
    member: CurrentMember = Depends(get_current_member),
    db: Session = Depends(get_db),
):
    gid = game_id.strip()
    return HasVotedOut(
        game_id=gid,
        voter_id=member.member_id,
        has_voted=highlight_voting.has_voted(db, gid, member.member_id),
    )


@router.post("/{game_id}/highlights/finalize", response_model=FinalizeOut)
def finalize(
    game_id: str,
    admin: CurrentMember = Depends(require_admin),
    db: Session = Depends(get_db),
):
    gid = game_id.strip()
    winner = highlight_voting.finalize_voting(db, gid)
    return FinalizeOut(game_id=gid, is_finalized=True, winner=winner)


@router.post("/{game_id}/highlights/reopen", response_model=VotingStatusOut)
def reopen(
    game_id: str,
    admin: CurrentMember = Depends(require_admin),
    db: Session = Depends(get_db),
):
    gid = game_id.strip()
    highlight_voting.reopen_voting(db, gid)
    return highlight_voting.get_voting_status(db, gid)


@router.delete("/{game_id}/highlights", response_model=DeleteVotingOut)
def delete_voting(
    game_id: str,
    admin: CurrentMember = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Hard reset: removes every vote and highlight of the game and the
    finalized flag. The next vote (or init) starts from scratch.
    """
    gid = game_id.strip()
    removed = highlight_voting.delete_voting(db, gid)
    return DeleteVotingOut(game_id=gid, votes=removed["votes"], highlights=removed["highlights"])
