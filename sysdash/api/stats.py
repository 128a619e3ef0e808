from fastapi import APIRouter, Depends

from sysdash.api.deps import get_identity, get_sampler
from sysdash.models.identity import HostIdentity
from sysdash.models.stats import MetricSnapshot
from sysdash.services.metrics_sampler import MetricsSampler

router = APIRouter()


@router.get("/stats", response_model=MetricSnapshot, summary="Live metrics")
def stats(sampler: MetricsSampler = Depends(get_sampler)) -> MetricSnapshot:
    """
    Return a fresh snapshot of CPU, RAM and disk usage plus uptime.

    Declared as a plain function so FastAPI runs it in the worker threadpool:
    the CPU sampling pause then blocks only this request, not the event loop.
    """
    return sampler.snapshot()


@router.get("/identity", response_model=HostIdentity, summary="Host identity")
async def identity(host: HostIdentity = Depends(get_identity)) -> HostIdentity:
    """Return the static host facts resolved at startup."""
    return host
