"""Realtime broadcaster: rooms, fan-out, pruning and lifecycle"""

import asyncio

import pytest

from app.realtime.broadcaster import RealtimeBroadcaster, job_room


class MockWS:
    def __init__(self, name="ws"):
        self.name = name
        self.messages = []

    async def send_json(self, data):
        self.messages.append(data)


class DeadWS:
    async def send_json(self, data):
        raise Exception("Connection lost")


@pytest.fixture
def hub():
    broadcaster = RealtimeBroadcaster(completion_delay=0.01)
    broadcaster.attach()
    return broadcaster


class TestMembership:
    def test_room_name(self):
        assert job_room("42") == "job-42"

    def test_join_replaces_previous_room(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")
        hub.join(ws, "a")
        hub.join(ws, "b")

        assert hub.room_size("a") == 0
        assert hub.room_size("b") == 1

    def test_leave_only_current_room(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")
        hub.join(ws, "a")
        hub.leave(ws, "other")
        assert hub.room_size("a") == 1
        hub.leave(ws, "a")
        assert hub.room_size("a") == 0

    def test_unregister_leaves_room(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")
        hub.join(ws, "a")
        hub.unregister(ws)

        assert hub.room_size("a") == 0
        assert hub.get_connection_stats()["totalConnections"] == 0

    def test_connection_stats_dedupe_users(self, hub):
        for name in ("a", "b"):
            hub.register(MockWS(name), "u1")
        hub.register(MockWS("c"), "u2")

        stats = hub.get_connection_stats()

        assert stats["totalConnections"] == 3
        assert sorted(stats["connectedUsers"]) == ["u1", "u2"]


class TestDelivery:
    @pytest.mark.asyncio
    async def test_job_update_reaches_room_and_owner(self, hub):
        watcher = MockWS("watcher")
        owner_tab = MockWS("owner")
        stranger = MockWS("stranger")
        hub.register(watcher, "u2")
        hub.register(owner_tab, "u1")
        hub.register(stranger, "u3")
        hub.join(watcher, "job1")

        delivered = await hub.broadcast_job_update("job1", "u1", "running", {"processed": 3})

        assert delivered == 2
        message = owner_tab.messages[0]
        assert message["event"] == "job_update"
        assert message["data"]["jobId"] == "job1"
        assert message["data"]["status"] == "running"
        assert message["data"]["processed"] == 3
        assert "timestamp" in message["data"]
        assert len(watcher.messages) == 1
        assert stranger.messages == []

    @pytest.mark.asyncio
    async def test_owner_in_room_receives_once(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")
        hub.join(ws, "job1")

        await hub.broadcast_job_update("job1", "u1", "running")

        assert len(ws.messages) == 1

    @pytest.mark.asyncio
    async def test_completed_update_is_delayed(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")

        delivered = await hub.broadcast_job_update("job1", "u1", "completed")

        assert delivered == 0
        assert ws.messages == []
        await asyncio.sleep(0.05)
        assert ws.messages[0]["data"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_detach_cancels_delayed_updates(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")
        await hub.broadcast_job_update("job1", "u1", "completed")

        await hub.detach()
        await asyncio.sleep(0.05)

        assert ws.messages == []

    @pytest.mark.asyncio
    async def test_progress_includes_current_url(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")

        await hub.broadcast_job_progress("job1", "u1", {"processed": 1, "total": 4, "current_url": "https://a.com/x"})

        data = ws.messages[0]["data"]
        assert ws.messages[0]["event"] == "job_progress"
        assert data["progress"]["total"] == 4
        assert data["current_url"] == "https://a.com/x"

    @pytest.mark.asyncio
    async def test_dead_sockets_pruned(self, hub):
        dead = DeadWS()
        good = MockWS()
        hub.register(dead, "u1")
        hub.register(good, "u1")
        hub.join(dead, "job1")

        delivered = await hub.broadcast_to_user("u1", "dashboard_stats", {"jobs": 1})

        assert delivered == 1
        assert hub.get_connection_stats()["totalConnections"] == 1
        assert hub.room_size("job1") == 0

    @pytest.mark.asyncio
    async def test_detached_broadcaster_is_noop(self):
        hub = RealtimeBroadcaster()
        ws = MockWS()
        hub.register(ws, "u1")

        assert await hub.broadcast_to_user("u1", "dashboard_stats", {}) == 0
        assert ws.messages == []

    @pytest.mark.asyncio
    async def test_user_scoped_helpers(self, hub):
        ws = MockWS()
        hub.register(ws, "u1")

        await hub.broadcast_dashboard_stats("u1", {"total_jobs": 2})
        await hub.broadcast_url_submission_update("u1", "job1", {"submitted": 5})
        await hub.broadcast_url_status_change("u1", "job1", "https://a.com", "indexed")
        await hub.broadcast_job_list_update("u1", "created", {"id": "job1"})

        assert [m["event"] for m in ws.messages] == [
            "dashboard_stats",
            "url_submission_update",
            "url_status_change",
            "job_list_update",
        ]
        assert ws.messages[2]["data"]["status"] == "indexed"
        assert ws.messages[3]["data"]["action"] == "created"
