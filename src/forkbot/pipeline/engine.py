import asyncio
from typing import List, Optional, Sequence

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage
from core.logging.logger import get_logger


class TransformationPipeline:
    """
    Stage들을 등록 순서대로 하나씩 실행.
    한 stage의 실패(예외 / timeout / tool 실패)는 다음 stage 실행을 막지 않음
    """

    def __init__(self, stages: Sequence[Stage], stage_timeout: Optional[float] = None):
        self.stages = list(stages)
        self.stage_timeout = stage_timeout
        self.logger = get_logger(__name__)

    async def run(self, context: PipelineContext) -> List[StageResult]:
        full_name = context.candidate.full_name
        self.logger.info(f"[{full_name}] Pipeline started ({len(self.stages)} stages)")

        for stage in self.stages:
            result = await self._run_stage(stage, context)
            context.results.append(result)

            if result.success:
                self.logger.info(f"[{full_name}] [stage={stage.name}] ✅ done {result.artifacts or ''}")
            else:
                self.logger.warning(f"[{full_name}] [stage={stage.name}] ❌ failed: {result.error}")

        failed = len(context.failures)
        self.logger.info(
            f"[{full_name}] Pipeline finished: "
            f"{len(self.stages) - failed} succeeded, {failed} failed"
        )
        return context.results

    async def _run_stage(self, stage: Stage, context: PipelineContext) -> StageResult:
        try:
            if self.stage_timeout:
                result = await asyncio.wait_for(stage.run(context), timeout=self.stage_timeout)
            else:
                result = await stage.run(context)
        except asyncio.TimeoutError:
            return StageResult(stage=stage.name, success=False, error=f"Timed out after {self.stage_timeout}s")
        except Exception as e:
            self.logger.debug(f"[{context.candidate.full_name}] [stage={stage.name}] traceback", exc_info=True)
            return StageResult(stage=stage.name, success=False, error=f"{type(e).__name__}: {e}")

        if result is None:
            return StageResult(stage=stage.name, success=True)
        return result
