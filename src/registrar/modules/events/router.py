"""
Live Updates Router

- GET /events - Server-Sent Events stream of request and student changes
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from registrar.core.events import EventBroker, get_event_broker

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get(
    "",
    summary="Live Update Stream",
    description="""
Open a Server-Sent Events stream.

Frames are `event: <type>` / `data: <json>` pairs. Types:
- `request-created`, `request-updated` with `{studentNo, requestId, status?}`
- `student-created`, `student-updated` with `{studentNo, status}`
- `ping` immediately on connect and after every quiet heartbeat interval

Payloads are hints only; clients re-fetch the affected data.
Events published before the client connected are not replayed.
""",
    response_class=StreamingResponse,
)
async def stream_events(
    request: Request,
    broker: EventBroker = Depends(get_event_broker),
) -> StreamingResponse:
    return StreamingResponse(
        broker.stream(is_disconnected=request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
