"""Shared FastAPI dependencies"""
from fastapi import Depends
from supabase import Client  # type: ignore

from app.features.billing.midtrans_client import MidtransClient
from app.infra.supabase.client import get_supabase_client
from app.infra.supabase.repositories import RepositoryFactory
from app.realtime.broadcaster import RealtimeBroadcaster, broadcaster

MIDTRANS_GATEWAY_SLUG = "midtrans"


def get_repositories(db: Client = Depends(get_supabase_client)) -> RepositoryFactory:
    return RepositoryFactory(db)


async def get_midtrans_client(repos: RepositoryFactory = Depends(get_repositories)) -> MidtransClient:
    """Midtrans client configured from the active gateway row (or the environment)"""
    gateway = await repos.payment_gateways.find_active_by_slug(MIDTRANS_GATEWAY_SLUG)
    return MidtransClient.from_gateway(gateway)


def get_broadcaster() -> RealtimeBroadcaster:
    return broadcaster
