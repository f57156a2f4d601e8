"""
Campaign sequencing with bounded crash recovery.

The supervisor walks the configured models in order, persisting a
checkpoint (model index, retry count) at every campaign boundary. A
campaign that crashes is started again with an incremented retry count
until the count reaches `max_process_retries`, at which point the whole run
aborts. A ConfigError aborts immediately.

Two modes:
- in-process (default): keeps looping until every model is done or the run
  aborts
- single campaign: runs the checkpointed model once, persists the next
  state and returns, leaving the relaunch to an external scheduler
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from src.core.config import Config
from src.core.context import RunContext
from src.core.error_logger import ErrorLogger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.errors import ConfigError
from src.core.logging import get_logger
from src.crawler.campaign import CampaignSummary
from src.store.checkpoint import Checkpoint, CheckpointStore

logger = get_logger(__name__)

CampaignRunner = Callable[[RunContext], Awaitable[CampaignSummary]]

COMPLETED = "completed"
ADVANCED = "advanced"
RETRY = "retry"
ABORTED = "aborted"


@dataclass
class SupervisorResult:
    status: str
    summaries: List[CampaignSummary] = field(default_factory=list)
    checkpoint: Optional[Checkpoint] = None
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.status in (COMPLETED, ADVANCED) else 1


class RestartSupervisor:
    """
    Args:
        config: Application configuration
        campaign: Coroutine function running one campaign for a RunContext
        models: Campaign models in order (default: config.campaign_models)
        store: Checkpoint store (default: <data_dir>/checkpoint.json)
        error_logger: Structured error sink
        dry_run / max_pages / audit: Run toggles copied into each RunContext
        single_campaign: Return after one campaign instead of looping
    """

    def __init__(
        self,
        config: Config,
        campaign: CampaignRunner,
        models: Optional[Sequence[str]] = None,
        store: Optional[CheckpointStore] = None,
        error_logger: Optional[ErrorLogger] = None,
        dry_run: bool = False,
        max_pages: Optional[int] = None,
        audit: bool = False,
        single_campaign: bool = False,
    ):
        self.config = config
        self.campaign = campaign
        self.models = list(models or config.campaign_models)
        self.store = store or CheckpointStore(config.data_dir / "checkpoint.json")
        self.error_logger = error_logger
        self.dry_run = dry_run
        self.max_pages = max_pages
        self.audit = audit
        self.single_campaign = single_campaign
        self.max_retries = config.max_process_retries

    def _context(self, checkpoint: Checkpoint) -> RunContext:
        return RunContext(
            config=self.config,
            model=self.models[checkpoint.model_index],
            model_index=checkpoint.model_index,
            retry_count=checkpoint.retry_count,
            dry_run=self.dry_run,
            max_pages=self.max_pages,
            audit_enabled=self.audit,
            error_logger=self.error_logger,
        )

    def _load_checkpoint(self) -> Checkpoint:
        checkpoint = self.store.load()
        if checkpoint.model_index >= len(self.models):
            logger.warning(
                f"[supervisor] Checkpoint index {checkpoint.model_index} out of range for "
                f"{len(self.models)} models, starting over"
            )
            checkpoint = Checkpoint()
        return checkpoint

    def _abort(self, ctx: RunContext, reason: str, summaries: List[CampaignSummary]) -> SupervisorResult:
        logger.error(f"[supervisor] Aborting: {reason}")
        ctx.audit.log("restart_log.txt", f"Aborted: {reason}")
        self.store.reset()
        return SupervisorResult(status=ABORTED, summaries=summaries, error=reason)

    def _report_crash(self, ctx: RunContext, exc: Exception) -> None:
        logger.exception(f"[supervisor] Campaign {ctx.model} crashed: {exc}")
        ctx.audit.log("restart_log.txt", f"Restarting due to: {exc}")
        ctx.audit.log("run_summary.txt", f"{ctx.model}: crashed on retry {ctx.retry_count} ({type(exc).__name__}: {exc})")
        if self.error_logger is not None:
            self.error_logger.log_exception(
                exc,
                component=ErrorComponent.SUPERVISOR,
                stage=ErrorStage.CAMPAIGN,
                model=ctx.model,
                severity=ErrorSeverity.CRITICAL,
                metadata={"retry_count": ctx.retry_count, "model_index": ctx.model_index},
            )

    async def run(self) -> SupervisorResult:
        if not self.models:
            raise ConfigError("No campaign models configured")

        checkpoint = self._load_checkpoint()
        summaries: List[CampaignSummary] = []

        while True:
            ctx = self._context(checkpoint)
            logger.info(f"[supervisor] Campaign {checkpoint.model_index + 1}/{len(self.models)}: {ctx.describe()}")
            try:
                summary = await self.campaign(ctx)
            except ConfigError as e:
                if self.error_logger is not None:
                    self.error_logger.log_exception(
                        e, component=ErrorComponent.CONFIG, stage=ErrorStage.CAMPAIGN,
                        model=ctx.model, severity=ErrorSeverity.CRITICAL,
                    )
                return self._abort(ctx, f"configuration error for {ctx.model}: {e}", summaries)
            except Exception as e:
                self._report_crash(ctx, e)
                if checkpoint.retry_count >= self.max_retries:
                    return self._abort(ctx, f"{ctx.model} failed after {checkpoint.retry_count} retries", summaries)
                checkpoint = checkpoint.retried()
                self.store.save(checkpoint)
                logger.warning(f"[supervisor] Retry {checkpoint.retry_count}/{self.max_retries} for {ctx.model}")
                if self.single_campaign:
                    return SupervisorResult(status=RETRY, summaries=summaries, checkpoint=checkpoint, error=str(e))
                continue

            summaries.append(summary)
            checkpoint = checkpoint.advanced()
            if checkpoint.model_index >= len(self.models):
                self.store.reset()
                logger.info(f"[supervisor] All {len(self.models)} models processed")
                return SupervisorResult(status=COMPLETED, summaries=summaries, checkpoint=Checkpoint())

            self.store.save(checkpoint)
            logger.info(f"[supervisor] Next model: {self.models[checkpoint.model_index]}")
            if self.single_campaign:
                return SupervisorResult(status=ADVANCED, summaries=summaries, checkpoint=checkpoint)
