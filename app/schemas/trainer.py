from datetime import datetime

from pydantic import BaseModel, Field


class TrainerCreateRequest(BaseModel):
    display_name: str = Field(min_length=2, max_length=120)


class TrainerResponse(BaseModel):
    id: int
    display_name: str
    created_at: datetime

    model_config = {"from_attributes": True}
