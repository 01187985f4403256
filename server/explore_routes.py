"""API routes for running an exploration as a server-sent event stream."""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from server import settings
from server.dependencies import get_explorer_factory
from stellarmind.client.sse import encode_event
from stellarmind.engine import Explorer
from stellarmind.models.exploration import ExploreRequest
from stellarmind.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post("/explore")
async def start_exploration(
    request: ExploreRequest,
    explorer_factory: Callable[[str], Explorer] = Depends(get_explorer_factory),
) -> StreamingResponse:
    """Stream node, edge, error and done events for a new exploration."""
    if not request.question or not request.question.strip():
        raise HTTPException(status_code=400, detail="Missing question in request body")

    model_id = request.model_id or settings.DEFAULT_MODEL_ID
    reading_level = request.reading_level or settings.DEFAULT_READING_LEVEL
    explorer = explorer_factory(model_id)
    logger.info(
        "Starting exploration with model %s%s", model_id, " (mock mode)" if explorer.mock_mode else ""
    )

    async def event_stream():
        async for event in explorer.explore(request.question, model_id, reading_level):
            yield encode_event(event)

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/explore")
def exploration_status(
    question: str | None = None,
    model_id: str | None = Query(default=None, alias="modelId"),
) -> dict:
    """Report that the endpoint is up, echoing the parameters."""
    if not question:
        raise HTTPException(status_code=400, detail="Missing question parameter")
    return {
        "message": "Exploration endpoint is available",
        "question": question,
        "modelId": model_id or settings.DEFAULT_MODEL_ID,
        "timestamp": utc_timestamp(),
    }


@router.delete("/explore")
def cancel_exploration() -> dict:
    """Acknowledge a cancellation; running streams end when the client disconnects."""
    return {"message": "Exploration cancelled", "timestamp": utc_timestamp()}
