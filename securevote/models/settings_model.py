from pydantic import BaseModel, Field
from typing import Optional


class ElectionSettings(BaseModel):
    name: str
    organization: str
    startDate: str
    endDate: str


class ElectionSettingsUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    name: Optional[str] = Field(None, examples=["Student Union Elections 2026"])
    organization: Optional[str] = None
    startDate: Optional[str] = Field(None, examples=["2026-04-05T08:00"])
    endDate: Optional[str] = Field(None, examples=["2026-04-07T18:00"])
