# app/routers/stream.py
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
import asyncio
import json
import logging
from typing import AsyncGenerator, Awaitable, Callable

from app.auth import CurrentUser, get_current_user
from app.config import STREAM_QUEUE_SIZE
from app.services.stream_bus import get_stream_bus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])


async def iter_ndjson(
    bus,
    pubsub,
    is_disconnected: Callable[[], Awaitable[bool]],
    queue_size: int = STREAM_QUEUE_SIZE,
) -> AsyncGenerator[bytes, None]:
    """
    Yield one NDJSON line per message received on `pubsub`.

    A background reader moves decoded payloads into a bounded asyncio.Queue; when the
    queue is full the oldest item is dropped so a slow client never stalls the reader.
    The subscriber is closed when the generator finishes.
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

    async def reader():
        try:
            async for msg in pubsub.listen():
                data = msg.get("data")
                if not data:
                    continue
                try:
                    obj = json.loads(data)
                except ValueError as ex:
                    logger.warning("stream: failed to decode pubsub message: %s", ex)
                    continue
                if queue.full():
                    try:
                        queue.get_nowait()
                    except asyncio.QueueEmpty:
                        pass
                await queue.put(obj)
        except asyncio.CancelledError:
            # Normal shutdown path.
            pass
        except Exception as ex:
            logger.exception("stream: reader task error: %s", ex)

    reader_task = asyncio.create_task(reader())

    try:
        while True:
            # Stop if client disconnects.
            if await is_disconnected():
                logger.info("stream: client disconnected")
                break

            item = await queue.get()
            yield (json.dumps(item, separators=(",", ":")) + "\n").encode("utf-8")
    finally:
        reader_task.cancel()
        await bus.close_subscriber(pubsub)


@router.get("/stream")
async def stream_notifications(request: Request, user: CurrentUser = Depends(get_current_user)):
    """
    GET /api/notifications/stream
    NDJSON stream of the caller's notifications as they are published.

    Status codes:
      - 200: Stream open
      - 401: No identity forwarded
      - 503: Subscriber could not be opened (Redis unavailable)
    """
    bus = get_stream_bus()

    # Open the subscriber up front so a broken bus fails the request instead of the stream.
    try:
        pubsub = await bus.open_subscriber(user.id)
        logger.debug("stream: subscriber opened for %s", user.id)
    except Exception as ex:
        logger.exception("stream: failed to open subscriber: %s", ex)
        raise HTTPException(status_code=503, detail="Stream service unavailable")

    headers = {
        "Cache-Control": "no-store",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return StreamingResponse(
        iter_ndjson(bus, pubsub, request.is_disconnected),
        media_type="application/x-ndjson",
        headers=headers,
    )
