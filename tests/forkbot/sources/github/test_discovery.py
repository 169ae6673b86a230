import random
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from github import GithubException

from forkbot.ledger.ledger import Ledger
from forkbot.models.ledger_entry import LedgerEntry
from forkbot.models.search_config import SearchConfig
from forkbot.sources.github.client import SearchPage
from forkbot.sources.github.discovery import DiscoveryClient
from forkbot.sources.github.quota import QuotaGuard


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


CONFIG = SearchConfig(languages=["X"], min_stars=3, max_stars=10, abandoned_months=6, license="mit", page_window=1)


def make_discovery(tmp_path, pages, clock=None, seed=0):
    client = MagicMock()
    client.search_page.side_effect = pages
    ledger = Ledger(tmp_path / "fork-log.json")
    quota = QuotaGuard(threshold=5, clock=clock or FakeClock(0))
    discovery = DiscoveryClient(
        client=client,
        ledger=ledger,
        quota=quota,
        rng=random.Random(seed),
        today=lambda: date(2024, 8, 31),
    )
    return discovery, client, ledger


class TestSearch:
    @pytest.mark.asyncio
    async def test_empty_item_list_returns_no_candidates(self, tmp_path):
        discovery, client, _ = make_discovery(tmp_path, [SearchPage(items=[]), SearchPage(items=[])])

        result = await discovery.search(CONFIG)

        assert result == []
        assert client.search_page.call_count == 2

    @pytest.mark.asyncio
    async def test_fetches_random_page_and_next(self, tmp_path, make_repo):
        config = CONFIG.model_copy(update={"page_window": 29})
        discovery, client, _ = make_discovery(tmp_path, [SearchPage(items=[]), SearchPage(items=[])], seed=7)

        await discovery.search(config)

        expected_start = random.Random(7).randint(1, 29)
        pages = [c.args[1] for c in client.search_page.call_args_list]
        assert pages == [expected_start, expected_start + 1]

    @pytest.mark.asyncio
    async def test_query_contains_filters(self, tmp_path):
        discovery, client, _ = make_discovery(tmp_path, [SearchPage(items=[]), SearchPage(items=[])])

        await discovery.search(CONFIG)

        query = client.search_page.call_args_list[0].args[0]
        assert "language:X" in query
        assert "stars:3..10" in query
        assert "pushed:<2024-02-29" in query
        assert "archived:false" in query
        assert "fork:false" in query
        assert "is:public" in query
        assert "license:mit" in query

    @pytest.mark.asyncio
    async def test_excludes_candidates_already_in_ledger(self, tmp_path, make_repo):
        pages = [SearchPage(items=[make_repo("a/b"), make_repo("c/d")]), SearchPage(items=[])]
        discovery, _, ledger = make_discovery(tmp_path, pages)
        ledger.record(LedgerEntry(full_name="a/b"))

        result = await discovery.search(CONFIG)

        assert [c.full_name for c in result] == ["c/d"]

    @pytest.mark.asyncio
    async def test_ledger_exclusion_survives_restart(self, tmp_path, make_repo):
        Ledger(tmp_path / "fork-log.json").record(LedgerEntry(full_name="a/b"))
        discovery, _, _ = make_discovery(tmp_path, [SearchPage(items=[make_repo("a/b")]), SearchPage(items=[])])

        assert await discovery.search(CONFIG) == []

    @pytest.mark.asyncio
    async def test_duplicates_across_pages_emitted_once(self, tmp_path, make_repo):
        pages = [SearchPage(items=[make_repo("a/b")]), SearchPage(items=[make_repo("a/b")])]
        discovery, _, _ = make_discovery(tmp_path, pages)

        result = await discovery.search(CONFIG)

        assert [c.full_name for c in result] == ["a/b"]

    @pytest.mark.asyncio
    async def test_ineligible_repos_are_dropped(self, tmp_path, make_repo):
        items = [make_repo("a/fork", fork=True), make_repo("a/old", archived=True), make_repo("a/big", stars=500)]
        discovery, _, _ = make_discovery(tmp_path, [SearchPage(items=items), SearchPage(items=[])])

        assert await discovery.search(CONFIG) == []

    @pytest.mark.asyncio
    async def test_seeded_shuffle_is_deterministic(self, tmp_path, make_repo):
        names = [f"o/r{i}" for i in range(8)]

        async def run(seed):
            pages = [SearchPage(items=[make_repo(n) for n in names]), SearchPage(items=[])]
            discovery, _, _ = make_discovery(tmp_path / str(seed), pages, seed=seed)
            return [c.full_name for c in await discovery.search(CONFIG)]

        first = await run(3)
        second = await run(3)
        assert first == second
        assert sorted(first) == sorted(names)


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_page_does_not_abort_scan(self, tmp_path, make_repo):
        pages = [RuntimeError("network down"), SearchPage(items=[make_repo("a/b")])]
        discovery, client, _ = make_discovery(tmp_path, pages)

        result = await discovery.search(CONFIG)

        assert [c.full_name for c in result] == ["a/b"]
        assert client.search_page.call_count == 2

    @pytest.mark.asyncio
    async def test_failed_language_does_not_abort_other_languages(self, tmp_path, make_repo):
        config = CONFIG.model_copy(update={"languages": ["X", "Y"]})
        error = GithubException(422, {"message": "Validation Failed"}, {})
        pages = [error, error, SearchPage(items=[make_repo("y/repo")]), SearchPage(items=[])]
        discovery, _, _ = make_discovery(tmp_path, pages)

        result = await discovery.search(config)

        assert [c.full_name for c in result] == ["y/repo"]


class TestQuotaBackoff:
    @pytest.mark.asyncio
    async def test_no_request_before_reset_when_quota_low(self, tmp_path, make_repo):
        clock = FakeClock(900.0)
        request_times = []

        def search_page(query, page):
            request_times.append(clock.now)
            if len(request_times) == 1:
                return SearchPage(items=[make_repo("a/b")], remaining=1, reset_at=1000)
            return SearchPage(items=[], remaining=30, reset_at=2000)

        discovery, client, _ = make_discovery(tmp_path, None, clock=clock)
        client.search_page.side_effect = search_page

        async def fake_sleep(seconds):
            clock.now += seconds

        with patch("asyncio.sleep", side_effect=fake_sleep) as mock_sleep:
            await discovery.search(CONFIG)

        assert len(request_times) == 2
        assert request_times[1] >= 1000
        mock_sleep.assert_called_once()

    @pytest.mark.asyncio
    async def test_no_wait_when_quota_is_fine(self, tmp_path):
        pages = [SearchPage(items=[], remaining=29, reset_at=1000), SearchPage(items=[], remaining=28, reset_at=1000)]
        discovery, _, _ = make_discovery(tmp_path, pages, clock=FakeClock(900.0))

        with patch("asyncio.sleep") as mock_sleep:
            await discovery.search(CONFIG)

        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_limit_error_waits_until_reset(self, tmp_path):
        clock = FakeClock(900.0)
        error = GithubException(403, {"message": "API rate limit exceeded"}, {"x-ratelimit-reset": "1000"})
        discovery, _, _ = make_discovery(tmp_path, [error, SearchPage(items=[])], clock=clock)

        async def fake_sleep(seconds):
            clock.now += seconds

        with patch("asyncio.sleep", side_effect=fake_sleep) as mock_sleep:
            result = await discovery.search(CONFIG)

        assert result == []
        mock_sleep.assert_called_once()
        assert clock.now >= 1000
