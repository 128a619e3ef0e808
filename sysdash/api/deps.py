from fastapi import Request

from sysdash.config import Settings
from sysdash.models.identity import HostIdentity
from sysdash.services.metrics_sampler import MetricsSampler


def get_identity(request: Request) -> HostIdentity:
    return request.app.state.identity


def get_sampler(request: Request) -> MetricsSampler:
    return request.app.state.sampler


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
