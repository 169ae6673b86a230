from datetime import date
from unittest.mock import MagicMock

from forkbot.models.search_config import SearchConfig
from forkbot.sources.github.filters import build_search_query, is_eligible, months_ago


CONFIG = SearchConfig(languages=["JavaScript"], min_stars=3, max_stars=10, abandoned_months=6, license="mit")


class TestMonthsAgo:
    def test_simple(self):
        assert months_ago(6, date(2024, 8, 15)) == date(2024, 2, 15)

    def test_crosses_year_boundary(self):
        assert months_ago(6, date(2024, 3, 10)) == date(2023, 9, 10)

    def test_clamps_to_end_of_month(self):
        assert months_ago(1, date(2023, 3, 31)) == date(2023, 2, 28)
        assert months_ago(1, date(2024, 3, 31)) == date(2024, 2, 29)


class TestBuildSearchQuery:
    def test_full_query(self):
        query = build_search_query("JavaScript", CONFIG, date(2024, 1, 1))
        assert query == (
            "language:JavaScript stars:3..10 pushed:<2024-01-01 "
            "archived:false is:public fork:false license:mit"
        )

    def test_license_filter_optional(self):
        config = CONFIG.model_copy(update={"license": None})
        query = build_search_query("TypeScript", config, date(2024, 1, 1))
        assert "license:" not in query
        assert query.startswith("language:TypeScript ")


class TestIsEligible:
    def make_repo(self, stars=5, fork=False, archived=False):
        return MagicMock(stargazers_count=stars, fork=fork, archived=archived)

    def test_accepts_in_range(self):
        assert is_eligible(self.make_repo(stars=3), CONFIG) is True
        assert is_eligible(self.make_repo(stars=10), CONFIG) is True

    def test_rejects_out_of_range(self):
        assert is_eligible(self.make_repo(stars=2), CONFIG) is False
        assert is_eligible(self.make_repo(stars=11), CONFIG) is False

    def test_rejects_forks_and_archived(self):
        assert is_eligible(self.make_repo(fork=True), CONFIG) is False
        assert is_eligible(self.make_repo(archived=True), CONFIG) is False
