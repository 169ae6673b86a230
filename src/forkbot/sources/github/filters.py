# src/forkbot/sources/github/filters.py

import calendar
from datetime import date
from typing import Optional

from forkbot.models.search_config import SearchConfig


def months_ago(months: int, today: Optional[date] = None) -> date:
    """
    today에서 N개월 전 날짜 (월말 보정: 3/31 - 1개월 → 2/28)
    """
    today = today or date.today()
    total = today.year * 12 + (today.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_search_query(language: str, config: SearchConfig, cutoff: date) -> str:
    """
    "language:JavaScript stars:3..10 pushed:<2024-01-01 archived:false is:public fork:false license:mit"
    """
    parts = [
        f"language:{language}",
        f"stars:{config.min_stars}..{config.max_stars}",
        f"pushed:<{cutoff.isoformat()}",
        "archived:false",
        "is:public",
        "fork:false",
    ]
    if config.license:
        parts.append(f"license:{config.license}")
    return " ".join(parts)


def is_eligible(repo, config: SearchConfig) -> bool:
    """
    Search index가 stale 할 수 있어서 한번 더 확인
    """
    if repo.fork or repo.archived:
        return False

    stars = repo.stargazers_count or 0
    if stars < config.min_stars or stars > config.max_stars:
        return False

    return True
