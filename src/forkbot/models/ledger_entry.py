from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    outcome: str = ""
