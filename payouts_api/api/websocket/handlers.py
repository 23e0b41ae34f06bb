"""WebSocket handlers for real-time analysis progress."""

import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from payouts.extraction import ImagePayload

from ..transformers.report_transformer import transform_report_to_frontend
from ...application.ports.progress import ProgressCallbackPort
from ...application.use_cases.run_analysis import RunAnalysisRequest, RunAnalysisUseCase

logger = logging.getLogger(__name__)


class WebSocketProgressCallback(ProgressCallbackPort):
    """Progress callback that sends updates via WebSocket."""

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket

    async def report_progress(
        self, progress: int, message: str, status: str = "processing"
    ) -> None:
        """Send progress update via WebSocket."""
        await self._websocket.send_json({
            "status": status,
            "progress": progress,
            "message": message,
        })


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({
        "status": "error",
        "progress": 0,
        "message": message,
    })


async def handle_analysis_websocket(websocket: WebSocket, use_case: RunAnalysisUseCase) -> None:
    """Handle WebSocket connection for one analysis run.

    Expected client message format:
    {
        "action": "analyze",
        "images": [{"data": "<base64>", "mimeType": "image/png"}],
        "slotsSold": 24,
        "tournament": "Friday cup"
    }

    Server sends progress updates:
    {
        "status": "connecting" | "processing" | "completed" | "error",
        "progress": 0-100,
        "message": "Human-readable status"
    }

    The final "completed" message carries the saved report under "report".

    Args:
        websocket: FastAPI WebSocket connection
        use_case: Analysis use case wired to the process-wide adapters
    """
    await websocket.accept()

    try:
        try:
            data = await websocket.receive_json()
        except ValueError:
            await _send_error(websocket, "Invalid JSON message")
            return

        action = data.get("action") if isinstance(data, dict) else None
        if action != "analyze":
            await _send_error(websocket, f"Unknown action: {action}")
            return

        try:
            images = [ImagePayload.model_validate(raw) for raw in data.get("images") or []]
            slots_sold = int(data.get("slotsSold", 24))
        except (ValidationError, TypeError, ValueError):
            await _send_error(websocket, "Each image needs data and mimeType; slotsSold must be an integer")
            return

        await websocket.send_json({
            "status": "connecting",
            "progress": 0,
            "message": "Initializing...",
        })

        result = await use_case.execute(
            RunAnalysisRequest(
                images=images,
                slots_sold=slots_sold,
                tournament=data.get("tournament") or None,
                mode=data.get("mode") or None,
            ),
            WebSocketProgressCallback(websocket),
        )

        # Failures were already reported through the progress callback.
        if not result.success:
            return

        await websocket.send_json({
            "status": "completed",
            "progress": 100,
            "message": "Report ready!",
            "report": transform_report_to_frontend(result.record, tz_name=use_case.report_timezone),
        })

    except WebSocketDisconnect:
        logger.info("Analysis client disconnected")
    finally:
        try:
            await websocket.close()
        except RuntimeError:
            # Already closed by the client.
            pass
