from pydantic import BaseModel
from typing import Optional


class Vote(BaseModel):
    candidateId: Optional[str] = None
    voterId: Optional[str] = None  # enables one-vote-per-institution receipts
    universityId: Optional[str] = None
