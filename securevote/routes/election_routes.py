import logging
from typing import List

from fastapi import APIRouter, Depends

from securevote import config, crud
from securevote.consistency import ensure_data_consistency
from securevote.database.connection import ElectionStore, get_store
from securevote.models.settings_model import ElectionSettings, ElectionSettingsUpdate
from securevote.schemas import ConsistencyReport, ElectionData, University, VoteStatistics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Election"])


@router.get("/election", response_model=ElectionData)
def get_election(store: ElectionStore = Depends(get_store)):
    """Candidates, settings, per-candidate vote counts and turnout in one payload."""
    data = crud.get_election_data(store)
    logger.info(f"Sending election data: {len(data['candidates'])} candidates, "
                f"{data['stats']['votesCast']} votes")
    return data


@router.get("/settings", response_model=ElectionSettings)
def get_settings(store: ElectionStore = Depends(get_store)):
    return crud.get_settings(store)


@router.put("/settings", response_model=ElectionSettings)
def update_settings(settings: ElectionSettingsUpdate, store: ElectionStore = Depends(get_store)):
    return crud.update_settings(store, settings)


@router.get("/stats", response_model=VoteStatistics)
def get_stats(store: ElectionStore = Depends(get_store)):
    return crud.get_stats(store)


@router.get("/universities", response_model=List[University])
def get_universities():
    return config.UNIVERSITIES


@router.post("/maintenance/consistency", response_model=ConsistencyReport, tags=["Maintenance"])
def run_consistency_check(store: ElectionStore = Depends(get_store)):
    return ensure_data_consistency(store)
