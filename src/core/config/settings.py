from pydantic_settings import BaseSettings
from typing import List, Optional


class AppSettings(BaseSettings):
    APP_NAME: str = "ForkBot"
    DEBUG: bool = False

    # ===== GitHub =====
    GITHUB_TOKEN: Optional[str] = None
    MAX_RESULTS: int = 10  # search per_page

    # Discovery
    TARGET_LANGUAGES: List[str] = ["JavaScript", "TypeScript"]
    MIN_STARS: int = 3
    MAX_STARS: int = 10
    ABANDONED_MONTHS: int = 6
    REQUIRED_LICENSE: str = "mit"
    SEARCH_PAGE_WINDOW: int = 29
    RATE_LIMIT_THRESHOLD: int = 5
    RANDOM_SEED: Optional[int] = None

    # Run
    MAX_CANDIDATES_PER_RUN: Optional[int] = None
    POLITE_DELAY_SECONDS: float = 1.5
    DRY_RUN: bool = False
    PR_PROBABILITY: float = 1.0
    LEDGER_PATH: str = "fork-log.json"
    WORKSPACE_ROOT: str = "forks"

    # Publication
    BRANCH_PREFIX: str = "forkbot/enhance"
    COMMIT_MESSAGE: str = "chore: automated enhancements"
    BOT_GIT_NAME: str = "forkbot"
    BOT_GIT_EMAIL: str = "forkbot@users.noreply.github.com"
    PR_REPORT_MAX_CHARS: int = 2000

    # ===== LLM =====
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Pipeline
    STAGE_TIMEOUT_SECONDS: Optional[float] = None
    FORMAT_COMMAND: List[str] = ["npx", "--yes", "prettier", "--write", "."]
    OPENAPI_COMMAND: List[str] = ["npx", "--yes", "-p", "swagger-jsdoc@6", "swagger-jsdoc"]

    class Config:
        # docker-compose env_file 또는 로컬 .env 사용
        env_file = ".env"
        extra = "ignore"


settings = AppSettings()
