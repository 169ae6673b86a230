import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from core.logging.logger import get_logger


class QuotaGuard:
    """
    GitHub rate limit 헤더 기반 대기
    remaining < threshold 이면 reset 시각까지 sleep (busy poll 아님)
    """

    def __init__(self, threshold: int = 5, clock: Callable[[], float] = time.time, margin_seconds: float = 1.0):
        self.threshold = threshold
        self.clock = clock
        self.margin_seconds = margin_seconds
        self.logger = get_logger(__name__)

    async def throttle(self, remaining: Optional[int], reset_at: Optional[int]) -> float:
        """
        Returns the number of seconds waited (0 when quota is fine).
        """
        if remaining is None or remaining >= self.threshold:
            return 0.0
        return await self.wait_until(reset_at, remaining)

    async def wait_until(self, reset_at: Optional[int], remaining: int = 0) -> float:
        if not reset_at:
            return 0.0

        wait_seconds = reset_at - self.clock() + self.margin_seconds
        if wait_seconds <= 0:
            return 0.0

        reset_time = datetime.fromtimestamp(reset_at, tz=timezone.utc)
        self.logger.warning(
            f"⚠️ Approaching GitHub API rate limit ({remaining} left). "
            f"Reset at {reset_time.strftime('%Y-%m-%d %H:%M:%S UTC')}. "
            f"Waiting {wait_seconds:.0f} seconds..."
        )
        await asyncio.sleep(wait_seconds)
        return wait_seconds
