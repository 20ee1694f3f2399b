from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from securevote.models.candidate_model import Candidate
from securevote.models.settings_model import ElectionSettings


class VoteStatistics(BaseModel):
    totalVoters: int
    votesCast: int
    turnoutPercentage: float
    lastUpdated: datetime


class ElectionData(BaseModel):
    candidates: List[Candidate]
    settings: ElectionSettings
    votes: Dict[str, int]
    stats: VoteStatistics


class CandidateRef(BaseModel):
    id: str
    name: str


class VoteReceipt(BaseModel):
    universityId: str
    voterId: str
    candidateId: str
    transactionHash: str
    timestamp: datetime


class VoteResult(BaseModel):
    success: bool
    candidate: CandidateRef
    newCount: int
    votes: Dict[str, int]
    stats: VoteStatistics
    receipt: Optional[VoteReceipt] = None


class ConsistencyReport(BaseModel):
    fixed: int
    removed: int


class University(BaseModel):
    id: str
    name: str


class HealthStatus(BaseModel):
    status: str
    message: str
    database: str
    timestamp: datetime
