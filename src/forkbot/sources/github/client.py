# src/forkbot/sources/github/client.py

from dataclasses import dataclass, field
from typing import List, Optional

from github import Auth, Github
from github.Repository import Repository

from core.logging.logger import get_logger


@dataclass
class SearchPage:
    items: List[Repository] = field(default_factory=list)
    remaining: Optional[int] = None   # x-ratelimit-remaining
    reset_at: Optional[int] = None    # x-ratelimit-reset (epoch seconds)


class GitHubClient:
    """
    Low-level GitHub API wrapper.
    Only responsible for HTTP communication.
    """

    def __init__(self, token: Optional[str], per_page: int = 30):
        auth = Auth.Token(token) if token else None
        self.client = Github(auth=auth, per_page=per_page)
        self.logger = get_logger(__name__)

    def search_page(self, query: str, page: int) -> SearchPage:
        """
        Search API 한 페이지 (page는 1부터)
        마지막 응답의 rate limit 헤더를 같이 반환
        """
        results = self.client.search_repositories(
            query=query,
            sort="updated",
            order="asc",
        )
        items = list(results.get_page(page - 1))
        remaining, _limit = self.client.rate_limiting
        return SearchPage(
            items=items,
            remaining=remaining,
            reset_at=self.client.rate_limiting_resettime,
        )

    def create_fork(self, full_name: str) -> Repository:
        """
        이미 fork 되어 있으면 GitHub이 기존 fork를 돌려줌 (idempotent)
        """
        upstream = self.client.get_repo(full_name)
        return upstream.create_fork()

    def get_default_branch(self, full_name: str) -> str:
        return self.client.get_repo(full_name).default_branch

    def create_pull_request(self, full_name: str, title: str, body: str, head: str, base: str) -> str:
        """
        PR 생성 후 html_url 반환
        """
        repo = self.client.get_repo(full_name)
        pull = repo.create_pull(title=title, body=body, head=head, base=base)
        self.logger.info(f"[{full_name}] Pull request opened: {pull.html_url}")
        return pull.html_url
