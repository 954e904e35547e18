from datetime import datetime
from typing import Any, Dict
from uuid import UUID

from pydantic import BaseModel


class GameSessionSchema(BaseModel):
    session_id: UUID
    state: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
