"""Webhook router for work-note change events.

The work-note application calls POST /webhook/work-note whenever a work
note is created, updated or deleted. The handler updates the vector index
in the background so the response is returned immediately.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from server.api.dependencies.auth import verify_api_key
from server.models.requests import WorkNoteWebhookRequest
from shared.models.errors import InvalidParameters

webhook_router = APIRouter()

WEBHOOK_EVENTS = ("upsert", "delete")


@webhook_router.post(
    "/webhook/work-note",
    dependencies=[Depends(verify_api_key)],
    tags=["Webhook"],
)
async def handle_work_note_webhook(
    request: Request,
    body: WorkNoteWebhookRequest,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    """Handle a work-note upsert or delete event.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (WorkNoteWebhookRequest): work_id, event and an optional chunk count hint.
        background_tasks (BackgroundTasks): Runs the index update after the response.

    Returns:
        JSONResponse: 202 acknowledgement with the received work_id.

    Raises:
        InvalidParameters: If the event is neither "upsert" nor "delete".
    """
    event = body.event.lower()
    if event not in WEBHOOK_EVENTS:
        raise InvalidParameters(f"Unsupported webhook event: {body.event!r}")
    request.app.state.logging.info("Webhook received: work_id=%r event=%s", body.work_id, event)

    index_service = request.app.state.index_service
    if event == "delete":
        background_tasks.add_task(index_service.do_remove_document, body.work_id, body.chunk_count)
    else:
        background_tasks.add_task(index_service.do_sync_document, body.work_id)

    return JSONResponse(status_code=202, content={"status": "accepted", "workId": body.work_id, "event": event})
