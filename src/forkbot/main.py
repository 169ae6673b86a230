import asyncio
import signal
import sys

from core.config.settings import AppSettings, settings
from core.containers.app_containers import AppContainer
from core.logging.logger import get_logger

logger = get_logger(__name__)

# Global controller reference for signal handler
controller_instance = None


class ConfigurationError(Exception):
    pass


def validate_settings(config: AppSettings) -> None:
    """
    live run에 필요한 설정이 없으면 시작 전에 중단
    """
    if not config.GITHUB_TOKEN:
        raise ConfigurationError(
            "GITHUB_TOKEN is not set. A token is required to fork, push and open pull requests."
        )
    if config.MIN_STARS > config.MAX_STARS:
        raise ConfigurationError(
            f"Invalid star range: MIN_STARS ({config.MIN_STARS}) > MAX_STARS ({config.MAX_STARS})"
        )
    if not config.TARGET_LANGUAGES:
        raise ConfigurationError("TARGET_LANGUAGES is empty")
    if not 0.0 <= config.PR_PROBABILITY <= 1.0:
        raise ConfigurationError(f"PR_PROBABILITY must be within [0, 1], got {config.PR_PROBABILITY}")

    if not config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set. Generated reports and tests will use fallback content")
    if config.DRY_RUN:
        logger.info("DRY_RUN enabled: changes are committed locally, nothing is pushed")


async def main() -> int:
    """
    Returns process exit status.
    개별 candidate 실패는 exit status에 영향 없음
    """
    global controller_instance

    logger.info("=" * 60)
    logger.info(f"{settings.APP_NAME} run starting")
    logger.info("=" * 60)

    try:
        validate_settings(settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    container = AppContainer()
    controller = container.controller()
    controller_instance = controller

    try:
        summary = await controller.run()
    except Exception as e:
        logger.error(f"Run aborted: {e}", exc_info=True)
        return 1

    logger.info(f"Run complete: {summary.processed} processed, {summary.failed} failed")
    return 0


def signal_handler(signum, frame):
    logger.info(f"Received signal {signum}. Finishing current candidate, then stopping")

    if controller_instance:
        controller_instance.shutdown_requested = True


def run():
    # Signal 등록
    signal.signal(signal.SIGINT, signal_handler)   # Ctrl+C
    signal.signal(signal.SIGTERM, signal_handler)  # Docker stop

    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown complete")
        sys.exit(130)


if __name__ == "__main__":
    run()
