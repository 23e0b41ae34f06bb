"""Use case for turning screenshots into a persisted prize report."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Callable, List, Optional

from payouts.config import ANALYSIS_CALL_DELAY_S, DEFAULT_REPORT_TIMEZONE, FULL_LOBBY_SLOTS
from payouts.errors import InputValidationError, PayoutsError
from payouts.extraction import ImagePayload
from payouts.models import AnalysisConfigSnapshot, AnalysisRecord, MatchResult
from payouts.prizes import adjust_prizes, effective_prizes
from payouts.ranking import rank_results
from payouts.task_queue import SequentialTaskQueue
from payouts.tournament import default_tournament_label

from ..ports.match_extraction import MatchExtractionPort
from ..ports.progress import ProgressCallbackPort
from ..ports.report_store import ReportStorePort
from .settings import SettingsService

logger = logging.getLogger(__name__)

# Thread pool for running blocking I/O operations
_executor = ThreadPoolExecutor(max_workers=4)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_millis(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RunAnalysisRequest:
    """Request to analyse a set of screenshots."""

    images: List[ImagePayload]
    slots_sold: int = FULL_LOBBY_SLOTS
    tournament: Optional[str] = None
    mode: Optional[str] = None


@dataclass
class RunAnalysisResult:
    """Result of an analysis run."""

    success: bool
    record: Optional[AnalysisRecord] = None
    error: Optional[str] = None
    status_code: int = 200


@dataclass
class RunAnalysisUseCase:
    """Use case for analysing screenshots into a ranked, persisted report.

    This orchestrates the process of:
    1. Extracting match results one screenshot at a time
    2. Scaling the prize table to the slots sold
    3. Ranking the teams and computing their earnings
    4. Persisting the report with a snapshot of the configuration

    A failure at any step aborts the run and nothing is persisted.
    """

    extraction: MatchExtractionPort
    report_store: ReportStorePort
    settings: SettingsService
    queue: SequentialTaskQueue = field(
        default_factory=lambda: SequentialTaskQueue(delay_s=ANALYSIS_CALL_DELAY_S)
    )
    report_timezone: str = DEFAULT_REPORT_TIMEZONE
    clock: Callable[[], datetime] = _utc_now

    async def execute(
        self,
        request: RunAnalysisRequest,
        progress_callback: Optional[ProgressCallbackPort] = None,
    ) -> RunAnalysisResult:
        """Execute the analysis use case.

        Args:
            request: Screenshots and tournament options
            progress_callback: Optional callback for progress updates

        Returns:
            Analysis result holding the saved record on success
        """
        loop = asyncio.get_running_loop()
        total = len(request.images)

        try:
            if total == 0:
                raise InputValidationError("Send at least one image.")
            if request.slots_sold < 0:
                raise InputValidationError("slotsSold must not be negative.")

            if progress_callback:
                await progress_callback.report_progress(
                    5, f"Analysing {total} screenshot(s)...", "processing"
                )

            async def extract(image: ImagePayload) -> List[MatchResult]:
                return await loop.run_in_executor(
                    _executor, partial(self.extraction.extract_matches, image)
                )

            async def on_done(idx: int, results: List[MatchResult]) -> None:
                logger.info(f"Screenshot {idx + 1}/{total}: {len(results)} teams")
                if progress_callback:
                    await progress_callback.report_progress(
                        5 + int(80 * (idx + 1) / total),
                        f"Screenshot {idx + 1} of {total} read",
                        "processing",
                    )

            batches = await self.queue.run(request.images, extract, on_done)

            settings = await loop.run_in_executor(_executor, self.settings.effective)
            rules = settings.prize_rules
            adjusted = adjust_prizes(
                rules,
                slots_sold=request.slots_sold,
                entry_fee=settings.entry_fee,
                mode=settings.adjustment_mode,
                fixed_profit=settings.fixed_profit,
            )
            ranked = rank_results(batches, effective_prizes(rules, adjusted))

            now = self.clock()
            record = AnalysisRecord(
                id=str(int(now.timestamp() * 1000)),
                created_at=_iso_millis(now),
                tournament=request.tournament or default_tournament_label(now, self.report_timezone),
                mode=request.mode,
                entries=ranked,
                config=AnalysisConfigSnapshot(
                    entry_fee=settings.entry_fee,
                    slots_sold=request.slots_sold,
                    prize_rules=rules,
                    adjusted_prizes=adjusted,
                    adjustment_mode=settings.adjustment_mode,
                    fixed_profit=settings.fixed_profit,
                ),
            )

            if progress_callback:
                await progress_callback.report_progress(90, "Saving report...", "processing")

            await loop.run_in_executor(_executor, partial(self.report_store.upsert, record))
            logger.info(f"Saved report {record.id} with {len(ranked)} ranked teams")

            return RunAnalysisResult(success=True, record=record)

        except PayoutsError as e:
            logger.warning(f"Analysis aborted: {e}")
            if progress_callback:
                await progress_callback.report_progress(0, f"Error: {e}", "error")
            return RunAnalysisResult(success=False, error=str(e), status_code=e.status_code)
        except Exception as e:
            logger.exception("Analysis failed")
            if progress_callback:
                await progress_callback.report_progress(0, f"Error: {e}", "error")
            return RunAnalysisResult(success=False, error=str(e), status_code=500)
