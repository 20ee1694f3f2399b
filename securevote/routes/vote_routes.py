import logging
from typing import List

from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException

from securevote import crud
from securevote.database.connection import ElectionStore, get_store
from securevote.ledger import AlreadyVotedError
from securevote.models.vote_model import Vote
from securevote.schemas import VoteReceipt, VoteResult

logger = logging.getLogger(__name__)

vote_router = APIRouter(prefix="/api", tags=["Vote"])


@vote_router.post("/vote", response_model=VoteResult)
def cast_vote(vote: Vote, store: ElectionStore = Depends(get_store)):
    """
    Casts a vote for a candidate.

    When `voterId` is supplied a receipt is stored and a second vote by the
    same voter for the same institution is rejected with 409. A `universityId`
    naming a different institution than the candidate's is rejected with 400.
    """
    if not vote.candidateId:
        raise HTTPException(status_code=400, detail="Candidate ID is required")
    logger.info(f"Casting vote for candidate ID: {vote.candidateId}")

    try:
        result = crud.cast_vote(store, vote.candidateId, vote.voterId, vote.universityId)
    except InvalidId:
        raise HTTPException(status_code=400, detail="Invalid candidate ID format")
    except AlreadyVotedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except crud.UniversityMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result is None:
        raise HTTPException(status_code=404, detail="No candidate exists with the provided ID")

    logger.info(f"Returning updated vote data: {result['stats']['votesCast']} total votes "
                f"({result['stats']['turnoutPercentage']}% turnout)")
    return result


@vote_router.get("/receipts/{voter_id}", response_model=List[VoteReceipt])
def get_receipts(voter_id: str, store: ElectionStore = Depends(get_store)):
    return crud.list_receipts(store, voter_id)
