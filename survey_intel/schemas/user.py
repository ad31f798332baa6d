# survey_intel/schemas/user.py
from pydantic import BaseModel, Field

class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)

class UserOut(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True  # pydantic v2: allow ORM objects

class UserStats(BaseModel):
    totalResponses: int
    aiInsightsGenerated: int
