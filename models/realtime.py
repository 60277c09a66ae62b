from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime, timezone

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]

class ChangeEvent(BaseModel):
    table: str
    type: ChangeType
    record: dict
    commit_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def record_id(self) -> Optional[str]:
        return self.record.get("id")
