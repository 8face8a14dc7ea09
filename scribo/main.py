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

from scribo.api.base import api_router  # noqa: E402
from scribo.config import get_settings  # noqa: E402
from scribo.db.base import Base  # noqa: E402
from scribo.db.session import dispose_engine, get_engine, get_session_factory  # noqa: E402
from scribo.features.recycle_bin import RecycleBinSweeper  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    sweeper = None

    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; recycle bin cleanup disabled")
    else:
        if settings.database_url.startswith("sqlite"):
            # Local development database: create tables on startup
            async with get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        if settings.enable_recycle_bin_sweeper:
            sweeper = RecycleBinSweeper(
                get_session_factory(),
                retention_days=settings.recycle_bin_retention_days,
                interval_seconds=settings.recycle_bin_sweep_interval_seconds,
            )
            sweeper.start()

    app.state.recycle_bin_sweeper = sweeper
    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop()
        await dispose_engine()


app = FastAPI(
    title="Scribo Backend API",
    description="Backend API for Scribo - shared notes with recycle bin and export",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Scribo Backend API",
        "docs": "/docs",
        "version": "1.0.0"
    }
