from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.ambient_sim.domain.events import EVENT_TYPES, SimulatorEvent, serialize_event
from src.ambient_sim.services.simulator import AmbientSimulator

logger = logging.getLogger("events")

router = APIRouter(prefix="/events", tags=["events"])


@router.websocket("/ws")
async def stream_events(websocket: WebSocket) -> None:
    """Stream every simulator event to the client as JSON.

    Messages have the shape ``{"event": "<name>", "data": {...}}``. Events are
    buffered per client up to ``max_ws_queue_size``; beyond that new events are
    dropped for that client. The subscription is removed when the client
    disconnects.
    """

    simulator: AmbientSimulator = websocket.app.state.simulator
    queue: asyncio.Queue = asyncio.Queue(maxsize=simulator.settings.max_ws_queue_size)

    def _enqueue(event: SimulatorEvent) -> None:
        try:
            queue.put_nowait(serialize_event(event))
        except asyncio.QueueFull:
            logger.warning("Dropping %s event for slow WebSocket client", event.name)

    for event_type in EVENT_TYPES:
        simulator.subscribe(event_type, _enqueue)

    receive_task = None
    get_task = None
    try:
        await websocket.accept()
        receive_task = asyncio.ensure_future(websocket.receive())
        while True:
            get_task = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({get_task, receive_task}, return_when=asyncio.FIRST_COMPLETED)

            if receive_task in done:
                message = receive_task.result()
                if message["type"] == "websocket.disconnect":
                    break
                # Inbound frames carry no meaning for this stream; keep listening.
                receive_task = asyncio.ensure_future(websocket.receive())

            if get_task in done:
                await websocket.send_json(get_task.result())
            else:
                get_task.cancel()
            get_task = None
    except WebSocketDisconnect:
        return
    finally:
        for event_type in EVENT_TYPES:
            simulator.unsubscribe(event_type, _enqueue)
        for task in (receive_task, get_task):
            if task is not None and not task.done():
                task.cancel()
