from pydantic import BaseModel, Field, constr

RequiredText = constr(strip_whitespace=True, min_length=1)


class CandidateIn(BaseModel):
    name: RequiredText = Field(..., examples=["John Doe"])
    university: RequiredText = Field(..., examples=["University of Delhi"])
    position: RequiredText = Field(..., examples=["President"])
    bio: str = ""


class Candidate(CandidateIn):
    id: str
