"""
WebSocket endpoint for live job updates.

Handshake: /ws?token=<Supabase access token>&userId=<user id>

Client -> server events:
- subscribe_job {jobId}: follow one of your own jobs (replaces any previous subscription)
- unsubscribe_job {jobId}
- ping

Server -> client events: connection, subscribed, unsubscribed, pong, error,
plus everything pushed by the broadcaster (job_update, job_progress, ...).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from supabase import Client  # type: ignore

from app.api.dependencies import get_broadcaster, get_repositories
from app.infra.supabase.client import get_supabase_client
from app.infra.supabase.repositories import RepositoryFactory
from app.middleware.auth import authenticate_socket
from app.realtime.broadcaster import RealtimeBroadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

UNAUTHORIZED_CLOSE_CODE = 4401


async def _reply(websocket: WebSocket, event: str, data: dict) -> None:
    await websocket.send_json({"event": event, "data": data})


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = None,
    userId: Optional[str] = None,
    db: Client = Depends(get_supabase_client),
    repos: RepositoryFactory = Depends(get_repositories),
    broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    await websocket.accept()
    client_id = str(uuid4())

    user_id = await authenticate_socket(db, token, userId)
    if not user_id:
        logger.info(f"[WS] Rejected connection {client_id}")
        await websocket.close(code=UNAUTHORIZED_CLOSE_CODE, reason="Unauthorized")
        return

    broadcaster.register(websocket, user_id)
    logger.info(f"[WS] User {user_id} connected ({client_id})")

    try:
        await _reply(websocket, "connection", {
            "message": "Connected to IndexNow Studio realtime updates",
            "clientId": client_id,
        })

        while True:
            raw_message = await websocket.receive_text()
            try:
                message = json.loads(raw_message)
                if not isinstance(message, dict):
                    raise ValueError("message must be an object")
            except ValueError as e:
                logger.debug(f"[WS] Invalid message from {client_id}: {e}")
                await _reply(websocket, "error", {"message": "Invalid message format"})
                continue

            event = message.get("event")
            data = message.get("data") or {}
            job_id = data.get("jobId") if isinstance(data, dict) else None

            if event == "subscribe_job" and job_id:
                if not await repos.indexing_jobs.find_for_user(str(job_id), user_id):
                    logger.warning(f"[WS] User {user_id} tried to follow job {job_id} they do not own")
                    await _reply(websocket, "error", {"message": "Job not found"})
                    continue
                broadcaster.join(websocket, str(job_id))
                await _reply(websocket, "subscribed", {"jobId": job_id})
            elif event == "unsubscribe_job" and job_id:
                broadcaster.leave(websocket, str(job_id))
                await _reply(websocket, "unsubscribed", {"jobId": job_id})
            elif event == "ping":
                await _reply(websocket, "pong", {"timestamp": datetime.now(timezone.utc).isoformat()})
            else:
                await _reply(websocket, "error", {"message": f"Unsupported event: {event}"})

    except WebSocketDisconnect:
        logger.info(f"[WS] User {user_id} disconnected ({client_id})")
    finally:
        broadcaster.unregister(websocket)
