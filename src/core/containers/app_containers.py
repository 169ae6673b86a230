import random

from dependency_injector import containers, providers

from core.config.settings import settings
from core.llm.openai_client import create_llm_client
from core.process.command_runner import CommandRunner
from forkbot.controller.run_controller import RunController
from forkbot.ledger.ledger import Ledger
from forkbot.models.search_config import SearchConfig
from forkbot.pipeline.engine import TransformationPipeline
from forkbot.pipeline.registry import default_stages
from forkbot.publish.publisher import BranchNamer, Publisher
from forkbot.sources.github.client import GitHubClient
from forkbot.sources.github.discovery import DiscoveryClient
from forkbot.sources.github.quota import QuotaGuard
from forkbot.workspace.acquisition import AcquisitionStage
from forkbot.workspace.git_client import GitClient


class AppContainer(containers.DeclarativeContainer):

    rng = providers.Singleton(random.Random, settings.RANDOM_SEED)

    # ===== Clients (process 당 1개) =====
    github_client = providers.Singleton(
        GitHubClient,
        token=settings.GITHUB_TOKEN,
        per_page=settings.MAX_RESULTS,
    )

    llm_client = providers.Singleton(
        create_llm_client,
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
    )

    command_runner = providers.Singleton(CommandRunner)

    git_client = providers.Singleton(GitClient, runner=command_runner)

    ledger = providers.Singleton(Ledger, path=settings.LEDGER_PATH)

    # ===== Components =====
    discovery = providers.Singleton(
        DiscoveryClient,
        client=github_client,
        ledger=ledger,
        quota=providers.Factory(QuotaGuard, threshold=settings.RATE_LIMIT_THRESHOLD),
        rng=rng,
    )

    acquisition = providers.Singleton(
        AcquisitionStage,
        github=github_client,
        git=git_client,
        workspace_root=settings.WORKSPACE_ROOT,
    )

    pipeline = providers.Singleton(
        TransformationPipeline,
        stages=providers.Callable(
            default_stages,
            runner=command_runner,
            llm=llm_client,
            format_command=settings.FORMAT_COMMAND,
            openapi_command=settings.OPENAPI_COMMAND,
        ),
        stage_timeout=settings.STAGE_TIMEOUT_SECONDS,
    )

    publisher = providers.Singleton(
        Publisher,
        github=github_client,
        git=git_client,
        token=settings.GITHUB_TOKEN,
        branch_namer=providers.Factory(BranchNamer, prefix=settings.BRANCH_PREFIX),
        commit_message=settings.COMMIT_MESSAGE,
        bot_name=settings.BOT_GIT_NAME,
        bot_email=settings.BOT_GIT_EMAIL,
        dry_run=settings.DRY_RUN,
        pr_probability=settings.PR_PROBABILITY,
        report_max_chars=settings.PR_REPORT_MAX_CHARS,
        rng=rng,
    )

    controller = providers.Singleton(
        RunController,
        discovery=discovery,
        acquisition=acquisition,
        pipeline=pipeline,
        publisher=publisher,
        ledger=ledger,
        search_config=providers.Callable(SearchConfig.from_settings, settings),
        polite_delay=settings.POLITE_DELAY_SECONDS,
        max_candidates=settings.MAX_CANDIDATES_PER_RUN,
    )
