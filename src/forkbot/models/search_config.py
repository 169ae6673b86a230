from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    languages: List[str] = Field(default_factory=lambda: ["JavaScript", "TypeScript"])
    min_stars: int = 3
    max_stars: int = 10
    abandoned_months: int = 6
    license: Optional[str] = "mit"
    page_window: int = 29

    @classmethod
    def from_settings(cls, settings) -> "SearchConfig":
        return cls(
            languages=settings.TARGET_LANGUAGES,
            min_stars=settings.MIN_STARS,
            max_stars=settings.MAX_STARS,
            abandoned_months=settings.ABANDONED_MONTHS,
            license=settings.REQUIRED_LICENSE or None,
            page_window=settings.SEARCH_PAGE_WINDOW,
        )
