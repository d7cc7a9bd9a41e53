"""
In-memory broadcaster for job status updates.

Sockets are tagged with the user that opened them and may subscribe to one
job room at a time ("job-<id>"). A job event goes to the job room and to every
socket of the job's owner, each socket receiving it once.

Delivery is best effort: nothing is queued or persisted, and a socket that
fails to receive is dropped. While the broadcaster is detached (before
application startup or after shutdown) every broadcast is a no-op.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import WebSocket

from app import config

logger = logging.getLogger(__name__)


def job_room(job_id: str) -> str:
    return f"job-{job_id}"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RealtimeBroadcaster:
    """
    Room-per-job broadcaster with per-user fan-out.

    All state is touched from the event loop only, so no locking is needed;
    socket sets are copied before any await.
    """

    def __init__(self, completion_delay: Optional[float] = None):
        self.completion_delay = (
            config.JOB_COMPLETION_BROADCAST_DELAY if completion_delay is None else completion_delay
        )
        self._attached = False
        # websocket -> user_id
        self._connections: Dict[WebSocket, str] = {}
        # room name -> sockets
        self._rooms: Dict[str, Set[WebSocket]] = {}
        # websocket -> room it is subscribed to
        self._socket_rooms: Dict[WebSocket, str] = {}
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Start delivering messages (called on application startup)"""
        self._attached = True
        logger.info("[REALTIME] Broadcaster attached")

    async def detach(self) -> None:
        """Stop delivering, cancel delayed sends and forget all sockets"""
        self._attached = False
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
        self._connections.clear()
        self._rooms.clear()
        self._socket_rooms.clear()
        logger.info("[REALTIME] Broadcaster detached")

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def register(self, websocket: WebSocket, user_id: str) -> None:
        self._connections[websocket] = user_id
        logger.debug(f"[REALTIME] Registered socket for user {user_id}. Total: {len(self._connections)}")

    def unregister(self, websocket: WebSocket) -> None:
        self._leave_current_room(websocket)
        user_id = self._connections.pop(websocket, None)
        logger.debug(f"[REALTIME] Unregistered socket for user {user_id}. Remaining: {len(self._connections)}")

    def join(self, websocket: WebSocket, job_id: str) -> str:
        """Subscribe a socket to a job room, leaving its previous room"""
        self._leave_current_room(websocket)
        room = job_room(job_id)
        self._rooms.setdefault(room, set()).add(websocket)
        self._socket_rooms[websocket] = room
        return room

    def leave(self, websocket: WebSocket, job_id: str) -> None:
        room = job_room(job_id)
        if self._socket_rooms.get(websocket) == room:
            self._leave_current_room(websocket)

    def _leave_current_room(self, websocket: WebSocket) -> None:
        room = self._socket_rooms.pop(websocket, None)
        if room and room in self._rooms:
            self._rooms[room].discard(websocket)
            if not self._rooms[room]:
                del self._rooms[room]

    def room_size(self, job_id: str) -> int:
        return len(self._rooms.get(job_room(job_id), set()))

    def get_connection_stats(self) -> Dict[str, Any]:
        """Socket count and de-duplicated connected user ids"""
        return {
            "totalConnections": len(self._connections),
            "connectedUsers": list(dict.fromkeys(self._connections.values())),
        }

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _user_sockets(self, user_id: Optional[str]) -> List[WebSocket]:
        if not user_id:
            return []
        return [ws for ws, uid in self._connections.items() if uid == user_id]

    async def _send(self, sockets: Iterable[WebSocket], event: str, data: Dict[str, Any]) -> int:
        """Send one envelope to each socket once; returns the number delivered"""
        if not self._attached:
            logger.debug(f"[REALTIME] Broadcaster detached, dropping '{event}'")
            return 0

        targets = list(dict.fromkeys(sockets))
        message = {"event": event, "data": data}
        delivered = 0
        dead: List[WebSocket] = []

        for ws in targets:
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception as e:
                logger.debug(f"[REALTIME] Failed to send '{event}': {e}")
                dead.append(ws)

        for ws in dead:
            self.unregister(ws)
        if dead:
            logger.debug(f"[REALTIME] Pruned {len(dead)} dead sockets")

        return delivered

    async def _send_job_event(self, job_id: str, user_id: Optional[str], event: str, data: Dict[str, Any]) -> int:
        sockets = list(self._rooms.get(job_room(job_id), set())) + self._user_sockets(user_id)
        return await self._send(sockets, event, data)

    async def _send_later(self, delay: float, job_id: str, user_id: Optional[str], event: str, data: Dict[str, Any]) -> None:
        await asyncio.sleep(delay)
        await self._send_job_event(job_id, user_id, event, data)

    async def broadcast_job_update(
        self,
        job_id: str,
        user_id: Optional[str],
        status: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Push a job_update event.

        A "completed" update is sent after `completion_delay` seconds on a
        background task, giving clients that are re-subscribing after a page
        change time to come back. Returns the number of sockets reached
        (0 for a delayed send).
        """
        payload = {"jobId": job_id, "status": status, **(data or {}), "timestamp": _timestamp()}

        if status == "completed" and self.completion_delay > 0 and self._attached:
            task = asyncio.create_task(
                self._send_later(self.completion_delay, job_id, user_id, "job_update", payload)
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return 0

        return await self._send_job_event(job_id, user_id, "job_update", payload)

    async def broadcast_job_progress(self, job_id: str, user_id: Optional[str], progress: Dict[str, Any]) -> int:
        payload: Dict[str, Any] = {"jobId": job_id, "progress": progress, "timestamp": _timestamp()}
        if progress.get("current_url"):
            payload["current_url"] = progress["current_url"]
        return await self._send_job_event(job_id, user_id, "job_progress", payload)

    async def broadcast_to_user(self, user_id: str, event: str, data: Dict[str, Any]) -> int:
        return await self._send(self._user_sockets(user_id), event, data)

    async def broadcast_dashboard_stats(self, user_id: str, stats: Dict[str, Any]) -> int:
        return await self.broadcast_to_user(user_id, "dashboard_stats", {**stats, "timestamp": _timestamp()})

    async def broadcast_url_submission_update(self, user_id: str, job_id: str, data: Dict[str, Any]) -> int:
        return await self.broadcast_to_user(
            user_id, "url_submission_update", {"jobId": job_id, **data, "timestamp": _timestamp()}
        )

    async def broadcast_url_status_change(self, user_id: str, job_id: str, url: str, status: str) -> int:
        return await self.broadcast_to_user(
            user_id,
            "url_status_change",
            {"jobId": job_id, "url": url, "status": status, "timestamp": _timestamp()},
        )

    async def broadcast_job_list_update(self, user_id: str, action: str, job: Dict[str, Any]) -> int:
        return await self.broadcast_to_user(
            user_id, "job_list_update", {"action": action, "job": job, "timestamp": _timestamp()}
        )


# Global singleton broadcaster instance
broadcaster = RealtimeBroadcaster()
