"""Realtime push to connected dashboard clients"""
from app.realtime.broadcaster import RealtimeBroadcaster, broadcaster, job_room

__all__ = ["RealtimeBroadcaster", "broadcaster", "job_room"]
