import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from forkbot.ledger.ledger import Ledger
from forkbot.models.candidate import CandidateRepository
from forkbot.models.ledger_entry import LedgerEntry
from forkbot.models.search_config import SearchConfig
from forkbot.pipeline.context import PipelineContext
from forkbot.pipeline.engine import TransformationPipeline
from forkbot.publish.publisher import PublicationError, Publisher
from forkbot.sources.github.discovery import DiscoveryClient
from forkbot.workspace.acquisition import AcquisitionError, AcquisitionStage
from core.logging.logger import get_logger


class CandidateState(str, Enum):
    DISCOVERED = "discovered"
    ACQUIRING = "acquiring"
    TRANSFORMING = "transforming"
    PUBLISHING = "publishing"
    RECORDED = "recorded"


PUBLICATION_OUTCOMES = {
    "opened": "published",
    "pushed": "pushed",
    "dry_run": "dry_run",
    "no_op": "no_op",
}


@dataclass
class RunSummary:
    discovered: int = 0
    processed: int = 0
    published: int = 0
    no_op: int = 0
    failed: int = 0


class RunController:
    """
    Discovery → (candidate 하나씩) Acquisition → Pipeline → Publication → Ledger

    Ledger 기록은 candidate를 꺼낸 이후 무조건 실행 (영구 실패 repo 무한 재시도 방지)
    """

    def __init__(
        self,
        discovery: DiscoveryClient,
        acquisition: AcquisitionStage,
        pipeline: TransformationPipeline,
        publisher: Publisher,
        ledger: Ledger,
        search_config: SearchConfig,
        polite_delay: float = 0.0,
        max_candidates: Optional[int] = None,
    ):
        self.discovery = discovery
        self.acquisition = acquisition
        self.pipeline = pipeline
        self.publisher = publisher
        self.ledger = ledger
        self.search_config = search_config
        self.polite_delay = polite_delay
        self.max_candidates = max_candidates
        self.logger = get_logger(__name__)
        self.shutdown_requested = False
        self.summary = RunSummary()

    async def run(self) -> RunSummary:
        self.summary = RunSummary()
        candidates = await self.discovery.search(self.search_config)
        self.summary.discovered = len(candidates)

        if self.max_candidates is not None:
            candidates = candidates[: self.max_candidates]

        if not candidates:
            self.logger.info("No candidates discovered. Nothing to do")
            return self.summary

        for candidate in candidates:
            if self.shutdown_requested:
                self.logger.info("Shutdown requested. Stopping before next candidate")
                break

            # 같은 run 안에서 ledger에 먼저 들어간 경우
            if self.ledger.has(candidate.full_name):
                self.logger.info(f"⏭️ Already processed: {candidate.full_name}")
                continue

            if self.summary.processed > 0 and self.polite_delay > 0:
                await asyncio.sleep(self.polite_delay)

            entry = await self.process_candidate(candidate)
            self.summary.processed += 1
            self._count(entry.outcome)

        self._log_summary()
        return self.summary

    async def process_candidate(self, candidate: CandidateRepository) -> LedgerEntry:
        full_name = candidate.full_name
        self._transition(full_name, CandidateState.DISCOVERED)

        try:
            outcome = await self._process(candidate)
        except Exception as e:
            self.logger.error(f"[{full_name}] Unexpected error: {e}", exc_info=True)
            outcome = "error"

        entry = LedgerEntry(full_name=full_name, outcome=outcome)
        self.ledger.record(entry)
        self._transition(full_name, CandidateState.RECORDED, outcome)
        return entry

    async def _process(self, candidate: CandidateRepository) -> str:
        full_name = candidate.full_name

        self._transition(full_name, CandidateState.ACQUIRING)
        try:
            workspace = await self.acquisition.acquire(candidate)
        except AcquisitionError as e:
            self.logger.error(f"[{full_name}] ❌ Acquisition failed: {e}")
            return "acquisition_failed"

        context = PipelineContext(
            workspace_path=workspace.path,
            candidate=candidate,
            fork_full_name=workspace.fork_full_name,
        )

        self._transition(full_name, CandidateState.TRANSFORMING)
        await self.pipeline.run(context)
        failed_stages = [r.stage for r in context.failures]

        # stage가 전부 실패해도 publication은 시도 (변경사항 유무로만 판단)
        self._transition(full_name, CandidateState.PUBLISHING)
        try:
            result = await self.publisher.publish(context)
        except PublicationError as e:
            self.logger.error(f"[{full_name}] ❌ Publication failed: {e}")
            outcome = "publication_failed"
        else:
            outcome = PUBLICATION_OUTCOMES[result.status]
            if result.pr_url:
                self.logger.info(f"[{full_name}] ✅ PR: {result.pr_url}")

        if failed_stages:
            outcome = f"{outcome}; failed stages: {', '.join(failed_stages)}"
        return outcome

    def _transition(self, full_name: str, state: CandidateState, detail: str = ""):
        self.logger.info(f"[{full_name}] → {state.value}" + (f" ({detail})" if detail else ""))

    def _count(self, outcome: str):
        status = outcome.split(";", 1)[0]
        if status in ("published", "pushed", "dry_run"):
            self.summary.published += 1
        elif status == "no_op":
            self.summary.no_op += 1
        else:
            self.summary.failed += 1

    def _log_summary(self):
        s = self.summary
        self.logger.info("=" * 60)
        self.logger.info("📊 Run Summary")
        self.logger.info("=" * 60)
        self.logger.info(f"Discovered: {s.discovered:4d}")
        self.logger.info(f"Processed:  {s.processed:4d}")
        self.logger.info(f"Published:  {s.published:4d}")
        self.logger.info(f"No-op:      {s.no_op:4d}")
        self.logger.info(f"Failed:     {s.failed:4d}")
        self.logger.info("=" * 60)
