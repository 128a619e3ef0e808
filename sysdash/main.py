import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from sysdash.api import dashboard, stats
from sysdash.config import Settings, get_settings
from sysdash.logger import setup_logging
from sysdash.services.identity_probe import IdentityProbe
from sysdash.services.metrics_sampler import MetricsSampler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Resolve the host identity and open the counters before the server
    accepts traffic; release the counters on shutdown.
    """
    settings: Settings = app.state.settings

    app.state.identity = IdentityProbe().identity
    logger.info("Host identity resolved: %s", app.state.identity.model_dump())

    sampler = MetricsSampler.open(
        settings.disk_path,
        cpu_sample_seconds=settings.cpu_sample_seconds,
    )
    app.state.sampler = sampler
    logger.info(
        "Metrics sampler ready (disk=%s, cpu pause=%.3fs, poll=%dms)",
        settings.disk_path,
        settings.cpu_sample_seconds,
        settings.poll_interval_ms,
    )
    try:
        yield
    finally:
        sampler.close()
        logger.info("Metrics sampler closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="SysDash", lifespan=lifespan)
    app.state.settings = settings

    app.include_router(dashboard.router, tags=["dashboard"])
    app.include_router(stats.router, prefix="/api", tags=["stats"])
    return app


app = create_app()
