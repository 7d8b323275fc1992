"""
Websocket side of the change feed.

Feed sockets are one-way: the server pushes snapshots and ignores anything
the client sends. The socket is still read, so a client that leaves a quiet
scope is noticed and its subscription released.
"""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from professordex.services.subscriptions import Subscription

logger = logging.getLogger(__name__)


async def _send_snapshots(
    websocket: WebSocket, subscription: Subscription, initial: dict[str, Any]
) -> None:
    await websocket.send_json(initial)
    async for snapshot in subscription:
        await websocket.send_json(snapshot)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def relay_snapshots(
    websocket: WebSocket, subscription: Subscription, initial: dict[str, Any]
) -> None:
    """
    Send `initial`, then every snapshot published on `subscription`.

    Returns once the client disconnects. Whichever side finishes first
    cancels the other.
    """
    sender = asyncio.create_task(_send_snapshots(websocket, subscription, initial))
    receiver = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        sender.cancel()
        receiver.cancel()
        await asyncio.gather(sender, receiver, return_exceptions=True)

    for task in done:
        if task.cancelled():
            continue
        error = task.exception()
        if error is not None and not isinstance(error, WebSocketDisconnect):
            raise error
    logger.debug("Feed client left %s", subscription.scope)
