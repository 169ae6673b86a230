import asyncio
import random
from datetime import date
from typing import Callable, List, Optional, Set

from github import GithubException

from forkbot.ledger.ledger import Ledger
from forkbot.mappers.candidate_mapper import map_candidate
from forkbot.models.candidate import CandidateRepository
from forkbot.models.search_config import SearchConfig
from forkbot.sources.github.client import GitHubClient
from forkbot.sources.github.filters import build_search_query, is_eligible, months_ago
from forkbot.sources.github.quota import QuotaGuard
from core.logging.logger import get_logger


class DiscoveryClient:
    """
    언어별 search query → 랜덤 페이지 2개 → shuffle → ledger dedup → CandidateRepository

    한 번 호출 = 한 번의 page set (무한 iterator 아님)
    """

    def __init__(
        self,
        client: GitHubClient,
        ledger: Ledger,
        quota: QuotaGuard,
        rng: Optional[random.Random] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.quota = quota
        self.rng = rng or random.Random()
        self.today = today or date.today
        self.logger = get_logger(__name__)

    async def search(self, config: SearchConfig) -> List[CandidateRepository]:
        cutoff = months_ago(config.abandoned_months, self.today())
        pool: List[CandidateRepository] = []
        seen: Set[str] = set()

        for language in config.languages:
            query = build_search_query(language, config, cutoff)
            start_page = self.rng.randint(1, max(1, config.page_window))

            for page in (start_page, start_page + 1):
                items = await self._fetch_page(query, page, language)
                if not items:
                    continue

                # API 랭킹 편향 줄이기
                self.rng.shuffle(items)

                for repo in items:
                    if not is_eligible(repo, config):
                        continue

                    full_name = repo.full_name
                    if full_name in seen:
                        continue
                    if self.ledger.has(full_name):
                        self.logger.info(f"⏭️ Already processed: {full_name}")
                        continue

                    seen.add(full_name)
                    pool.append(map_candidate(repo))

        self.logger.info(f"🔍 Total matching repositories: {len(pool)}")
        for idx, candidate in enumerate(pool, start=1):
            self.logger.info(f"{idx}. {candidate.full_name} ({candidate.stargazers_count}⭐)")

        return pool

    async def _fetch_page(self, query: str, page: int, language: str) -> list:
        """
        실패한 페이지는 로그만 남기고 skip (나머지 스캔은 계속)
        """
        try:
            result = await asyncio.to_thread(self.client.search_page, query, page)
        except GithubException as e:
            await self._handle_github_error(e, language, page)
            return []
        except Exception as e:
            self.logger.error(f"❌ Error searching repositories (language: {language}, page: {page}): {e}")
            return []

        # 다음 요청 전에 quota 확인
        await self.quota.throttle(result.remaining, result.reset_at)

        if not result.items:
            self.logger.info(f"ℹ️ No results found for language: {language} (page {page})")
            return []

        return list(result.items)

    async def _handle_github_error(self, error: GithubException, language: str, page: int):
        """
        GitHub API 에러 처리 (rate limit 포함)
        """
        if error.status in (403, 429):
            headers = error.headers or {}
            reset_timestamp = int(headers.get("x-ratelimit-reset", 0) or 0)
            if reset_timestamp > 0:
                self.logger.warning(
                    f"Rate limit exceeded while searching {language} (page {page}). Page skipped"
                )
                await self.quota.wait_until(reset_timestamp)
                return

        message = error.data.get("message", str(error)) if isinstance(error.data, dict) else str(error)
        self.logger.error(
            f"❌ GitHub API error ({error.status}) searching {language} (page {page}): {message}"
        )
