"""REST API routes for screenshot analysis and prize calculation."""

import asyncio
import logging
from functools import partial
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from payouts.extraction import ImagePayload, format_extracted_texts
from payouts.models import AdjustmentMode, PrizeRules
from payouts.money import sum_values
from payouts.prizes import adjust_prizes, effective_prizes, organizer_profit

from ..errors import error_response
from ..transformers.report_transformer import transform_report_to_frontend
from ...application.ports.match_extraction import MatchExtractionPort
from ...application.use_cases.run_analysis import RunAnalysisRequest, RunAnalysisUseCase
from ...application.use_cases.settings import SettingsService, validate_patch
from ...dependencies import get_extraction, get_run_analysis_use_case, get_settings_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    """Request body for single-screenshot extraction."""

    image: ImagePayload


class OcrRequest(BaseModel):
    images: List[ImagePayload] = Field(..., min_length=1)


class CalculateRequest(BaseModel):
    text: str = Field(..., description="Free text holding monetary values")


class AnalysisRequest(BaseModel):
    """Request body for a full analysis run."""

    model_config = ConfigDict(populate_by_name=True)

    images: List[ImagePayload] = Field(..., description="Screenshots, in match order")
    slots_sold: int = Field(default=24, alias="slotsSold", ge=0, description="Slots sold in the lobby")
    tournament: Optional[str] = Field(default=None, description="Tournament label; defaults to the run time")
    mode: Optional[str] = Field(default=None, description="Free-form match mode label")


class PrizePreviewRequest(BaseModel):
    """Slot count plus optional overrides of the stored settings."""

    model_config = ConfigDict(populate_by_name=True)

    slots_sold: int = Field(..., alias="slotsSold", ge=0)
    entry_fee: Optional[float] = Field(default=None, alias="entryFee", ge=0)
    adjustment_mode: Optional[AdjustmentMode] = Field(default=None, alias="adjustmentMode")
    fixed_profit: Optional[float] = Field(default=None, alias="fixedProfit", ge=0)
    prize_rules: Optional[Dict[str, Any]] = Field(default=None, alias="prizeRules")


@router.post("/analyze")
async def analyze_screenshot(
    request: AnalyzeRequest,
    extraction: MatchExtractionPort = Depends(get_extraction),
):
    """Extract every team result visible in one screenshot.

    Returns:
        Array of ``{playerNames, kills, placement}`` in model order
    """
    loop = asyncio.get_running_loop()
    results = await loop.run_in_executor(None, partial(extraction.extract_matches, request.image))
    return [r.to_dict() for r in results]


@router.post("/ocr")
async def extract_texts(
    request: OcrRequest,
    extraction: MatchExtractionPort = Depends(get_extraction),
):
    """Extract visible text from each image, 0.5 s apart."""
    loop = asyncio.get_running_loop()
    texts = await loop.run_in_executor(None, partial(extraction.extract_texts, request.images))
    return {"texts": texts, "summary": format_extracted_texts(texts)}


@router.post("/calculate")
async def calculate_values(request: CalculateRequest):
    """Sum the monetary values found in free text."""
    return sum_values(request.text).to_dict()


@router.post("/analysis")
async def run_analysis(
    request: AnalysisRequest,
    use_case: RunAnalysisUseCase = Depends(get_run_analysis_use_case),
):
    """Analyse screenshots, rank the teams and persist the report.

    Progress is not streamed here; use ``WS /ws/analysis`` for that.

    Returns:
        The saved report in frontend format
    """
    result = await use_case.execute(
        RunAnalysisRequest(
            images=request.images,
            slots_sold=request.slots_sold,
            tournament=request.tournament,
            mode=request.mode,
        )
    )
    if not result.success:
        return error_response(result.status_code, result.error or "Analysis failed")
    return transform_report_to_frontend(result.record, tz_name=use_case.report_timezone)


@router.post("/prizes/preview")
def preview_prizes(
    request: PrizePreviewRequest,
    settings: SettingsService = Depends(get_settings_service),
):
    """Adjusted prize table for a slot count under the current (or given) settings."""
    if request.prize_rules is not None:
        validate_patch({"prizeRules": request.prize_rules})
    current = settings.effective()
    rules = PrizeRules.from_dict(request.prize_rules) if request.prize_rules is not None else current.prize_rules
    entry_fee = request.entry_fee if request.entry_fee is not None else current.entry_fee
    mode = request.adjustment_mode or current.adjustment_mode
    fixed_profit = request.fixed_profit if request.fixed_profit is not None else current.fixed_profit

    adjusted = adjust_prizes(
        rules,
        slots_sold=request.slots_sold,
        entry_fee=entry_fee,
        mode=mode,
        fixed_profit=fixed_profit,
    )
    collected = request.slots_sold * entry_fee
    return {
        "slotsSold": request.slots_sold,
        "collected": collected,
        "organizerProfit": organizer_profit(collected, mode, fixed_profit),
        "prizeRules": rules.to_dict(),
        "adjustedPrizes": adjusted.to_dict() if adjusted is not None else None,
        "prizeTable": effective_prizes(rules, adjusted).to_dict(),
    }
