from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class SavedComposition(BaseModel):
    """
    One flattened composition, keyed by its user-given name.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="_id")
    data: str
    sha256: str
    bytes: int
    session_id: Optional[str] = None
    created_at: datetime
