"""
Talent Analyzer API

FastAPI application that turns a GitHub profile into a Web3 hiring report.
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .config import (
    ANALYSIS_TIMEOUT_SECONDS,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_SWEEP_SECONDS,
    RATE_LIMIT_WINDOW_SECONDS,
    REPORT_CACHE_SIZE,
    REPORT_CACHE_TTL_SECONDS,
    get_settings,
)
from .database import get_db, init_db, save_analysis
from .dependencies import (
    get_github_client,
    get_rate_limiter,
    get_report_cache,
    get_report_generator,
)
from .errors import (
    AnalysisTimeoutError,
    AnalyzerError,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    InvalidProfileError,
    RateLimitExceededError,
    ReportGenerationError,
)
from .logging_config import setup_logging
from .pipeline import parse_github_username, run_analysis
from .routers.analysis import router as analysis_router
from .schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    HiringReport,
    ProfileSnapshot,
    RawSummary,
)
from .services.cache import (
    RateLimiter,
    RateLimitResult,
    TTLCache,
    cache_key_for,
    get_client_identifier,
    sweep_rate_limiter,
)
from .services.github import GitHubClient
from .services.report import ReportGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails fast when credentials are missing
    settings = get_settings()
    setup_logging(settings.environment, settings.log_level)
    init_db()

    app.state.report_cache = TTLCache(max_size=REPORT_CACHE_SIZE, ttl_seconds=REPORT_CACHE_TTL_SECONDS)
    app.state.rate_limiter = RateLimiter(
        max_requests=RATE_LIMIT_MAX_REQUESTS,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.github_client = GitHubClient(token=settings.github_token)
    app.state.report_generator = ReportGenerator(
        model=settings.gemini_model,
        api_key=settings.gemini_api_key,
    )
    app.state.rate_limit_sweeper = asyncio.create_task(
        sweep_rate_limiter(app.state.rate_limiter, RATE_LIMIT_SWEEP_SECONDS)
    )
    logger.info(f"Talent Analyzer started ({settings.environment}, model {settings.gemini_model})")

    yield

    app.state.rate_limit_sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await app.state.rate_limit_sweeper
    await app.state.github_client.aclose()


app = FastAPI(
    title="Talent Analyzer API",
    description="GitHub profile analyzer producing Web3 hiring reports",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://localhost:8080",
    ).split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    expose_headers=["X-Cache", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)

app.include_router(analysis_router)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

ERROR_TITLES = {
    InvalidProfileError: "Invalid GitHub URL",
    GitHubNotFoundError: "User not found",
    GitHubRateLimitError: "GitHub API rate limit",
    RateLimitExceededError: "Rate limit exceeded",
    ReportGenerationError: "Analysis failed",
    AnalysisTimeoutError: "Analysis timed out",
    GitHubAPIError: "GitHub API error",
}


def rate_limit_headers(limit: int, result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(result.reset_at)),
    }


@app.exception_handler(RateLimitExceededError)
async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
    reset_at = datetime.fromtimestamp(exc.reset_at, tz=timezone.utc)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": ERROR_TITLES[RateLimitExceededError],
            "message": f"Too many requests. Please try again after {reset_at.strftime('%H:%M:%S')} UTC",
            "reset_at": int(exc.reset_at),
        },
        headers=rate_limit_headers(
            exc.limit,
            RateLimitResult(allowed=False, remaining=0, reset_at=exc.reset_at),
        ),
    )


@app.exception_handler(AnalyzerError)
async def analyzer_error_handler(request: Request, exc: AnalyzerError):
    title = next(
        (title for cls, title in ERROR_TITLES.items() if isinstance(exc, cls)),
        "Internal server error",
    )
    message = exc.message
    if isinstance(exc, GitHubRateLimitError):
        message = "GitHub API rate limit exceeded. Please try again later."
    elif isinstance(exc, ReportGenerationError):
        message = "Failed to generate hiring report. Please try again."

    return JSONResponse(status_code=exc.status_code, content={"error": title, "message": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "message": "profile_url is required"},
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
def read_root():
    """Health check endpoint."""
    return {"status": "ok", "version": "1.0.0", "message": "Talent Analyzer API"}


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_profile(
    request: Request,
    response: Response,
    body: AnalyzeRequest,
    db: Session = Depends(get_db),
    report_cache: TTLCache[HiringReport] = Depends(get_report_cache),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    github: GitHubClient = Depends(get_github_client),
    generator: ReportGenerator = Depends(get_report_generator),
):
    """
    Analyze a GitHub profile and return a hiring report.

    Served from the in-process cache when the same username was analyzed
    within the cache TTL. Fresh reports are persisted best-effort.
    """
    client_id = get_client_identifier(request)
    rate_limit = rate_limiter.check(client_id)
    if not rate_limit.allowed:
        logger.warning("Client rate limit exceeded", extra={"client": client_id})
        raise RateLimitExceededError(reset_at=rate_limit.reset_at, limit=rate_limiter.max_requests)
    response.headers.update(rate_limit_headers(rate_limiter.max_requests, rate_limit))

    username = parse_github_username(body.profile_url)

    cache_key = cache_key_for(username)
    cached_report = report_cache.get(cache_key)
    if cached_report is not None:
        logger.info(f"Serving cached report for {username}", extra={"username": username.lower(), "cache": "HIT"})
        response.headers["X-Cache"] = "HIT"
        return AnalyzeResponse(report=cached_report, cached=True, username=username)

    started = time.perf_counter()
    try:
        result = await asyncio.wait_for(
            run_analysis(username, github, generator),
            timeout=ANALYSIS_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"Analysis for {username} exceeded {ANALYSIS_TIMEOUT_SECONDS}s")
        raise AnalysisTimeoutError("Analysis timed out. Please try again.")

    report_cache.set(cache_key, result.report)
    # Blocking SQLAlchemy I/O stays off the event loop
    analysis_id = await run_in_threadpool(save_analysis, db, username, body.profile_url, result)
    logger.info(
        f"Analysis complete for {username}",
        extra={
            "username": username.lower(),
            "cache": "MISS",
            "analysis_id": analysis_id,
            "duration_ms": round((time.perf_counter() - started) * 1000),
        },
    )

    profile = result.summary.profile
    raw = RawSummary(
        profile_summary=ProfileSnapshot(
            username=profile.login,
            name=profile.name,
            bio=profile.bio,
            location=profile.location,
            public_repos=profile.public_repos,
            followers=profile.followers,
        ),
        stats=result.payload.aggregate_stats,
        web3_repos={
            item.repo.name: item.web3_detection
            for item in result.payload.repos
            if item.web3_detection and item.web3_detection.is_web3
        },
    )

    response.headers["X-Cache"] = "MISS"
    return AnalyzeResponse(
        report=result.report,
        cached=False,
        username=username,
        analysis_id=analysis_id,
        raw=raw,
    )
