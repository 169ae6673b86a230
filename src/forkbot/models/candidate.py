from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CandidateRepository(BaseModel):
    """
    Discovery 결과 (immutable).
    Identity = full_name (owner/name)
    """

    model_config = ConfigDict(frozen=True)

    full_name: str
    clone_url: str
    html_url: Optional[str] = None
    default_branch: str = "main"
    language: Optional[str] = None
    description: Optional[str] = None
    stargazers_count: int = 0
    created_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    owner: str

    @property
    def name(self) -> str:
        return self.full_name.split("/", 1)[-1]
