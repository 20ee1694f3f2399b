import logging
from typing import List

from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Path, Response

from securevote import crud
from securevote.database.connection import ElectionStore, get_store
from securevote.models.candidate_model import Candidate, CandidateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/candidates", tags=["Candidates"])


@router.get("", response_model=List[Candidate])
def get_candidates(store: ElectionStore = Depends(get_store)):
    candidates = crud.list_candidates(store)
    logger.info(f"Returning {len(candidates)} candidates")
    return candidates


@router.get("/university/{university}", response_model=List[Candidate])
def get_candidates_by_university(
    university: str = Path(..., description="Institution name or id"),
    store: ElectionStore = Depends(get_store),
):
    university = university.strip()
    if not university:
        raise HTTPException(status_code=400, detail="University parameter is required")
    candidates = crud.list_candidates(store, university=university)
    logger.info(f"Found {len(candidates)} candidates for university: {university}")
    return candidates


@router.post("", response_model=Candidate, status_code=201)
def add_candidate(candidate: CandidateIn, store: ElectionStore = Depends(get_store)):
    return crud.create_candidate(store, candidate)


@router.get("/{candidate_id}", response_model=Candidate)
def get_candidate(candidate_id: str, store: ElectionStore = Depends(get_store)):
    try:
        candidate = crud.get_candidate(store, candidate_id)
    except InvalidId:
        raise HTTPException(status_code=400, detail="Invalid candidate ID")
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


@router.put("/{candidate_id}", response_model=Candidate)
def update_candidate(candidate_id: str, candidate: CandidateIn, store: ElectionStore = Depends(get_store)):
    try:
        updated = crud.update_candidate(store, candidate_id, candidate)
    except InvalidId:
        raise HTTPException(status_code=400, detail="Invalid candidate ID")
    if not updated:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return updated


@router.delete("/{candidate_id}", status_code=204)
def delete_candidate(candidate_id: str, store: ElectionStore = Depends(get_store)):
    try:
        deleted = crud.delete_candidate(store, candidate_id)
    except InvalidId:
        raise HTTPException(status_code=400, detail="Invalid candidate ID")
    if not deleted:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return Response(status_code=204)
