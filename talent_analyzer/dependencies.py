"""
Request dependencies for process-wide collaborators.

The instances live on `app.state` (created in the app lifespan) and are
handed to handlers through these functions, so tests can swap them with
`app.dependency_overrides`.
"""

from fastapi import Request

from .schemas import HiringReport
from .services.cache import RateLimiter, TTLCache
from .services.github import GitHubClient
from .services.report import ReportGenerator


def get_report_cache(request: Request) -> TTLCache[HiringReport]:
    return request.app.state.report_cache


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client


def get_report_generator(request: Request) -> ReportGenerator:
    return request.app.state.report_generator
