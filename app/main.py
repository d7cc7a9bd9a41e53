import logging

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from app import config  # noqa: E402
from app.api.base import api_router  # noqa: E402
from app.core.errors import register_exception_handlers  # noqa: E402
from app.realtime.broadcaster import broadcaster  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    broadcaster.attach()
    yield
    await broadcaster.detach()


app = FastAPI(
    title="IndexNow Studio API",
    description="Backend API for IndexNow Studio - URL indexing jobs, quotas and Midtrans billing",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials="*" not in config.CORS_ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "IndexNow Studio API",
        "docs": "/docs",
        "version": "1.0.0"
    }
