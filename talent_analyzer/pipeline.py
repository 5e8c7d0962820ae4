"""
Analysis pipeline: GitHub fetch -> Web3 detection -> payload -> report.

Steps run strictly in sequence for one request. Caching, rate limiting and
persistence are handled by the caller (see main.py).
"""

import logging
import re
from dataclasses import dataclass

from .analyzers import build_analysis_payload, detect_web3
from .errors import InvalidProfileError
from .schemas import AnalysisPayload, GitHubSummary, HiringReport, RepoAnalysis
from .services.github import GitHubClient
from .services.report import ReportGenerator

logger = logging.getLogger(__name__)

# GitHub usernames: alphanumerics and single hyphens, at most 39 chars
USERNAME_PATTERN = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})"
PROFILE_URL_RE = re.compile(
    rf"^(?:https?://)?(?:www\.)?github\.com/({USERNAME_PATTERN})/?$",
    re.IGNORECASE,
)
USERNAME_RE = re.compile(rf"^{USERNAME_PATTERN}$")


def parse_github_username(profile_ref: str) -> str:
    """
    Extract a username from a profile URL or a bare username.

    Raises InvalidProfileError when nothing usable can be extracted.
    """
    cleaned = (profile_ref or "").strip()
    if not cleaned:
        raise InvalidProfileError("profile_url is required")

    if USERNAME_RE.match(cleaned):
        return cleaned

    match = PROFILE_URL_RE.match(cleaned)
    if match:
        return match.group(1)

    raise InvalidProfileError("Could not extract a GitHub username from the provided URL")


@dataclass
class AnalysisResult:
    summary: GitHubSummary
    payload: AnalysisPayload
    report: HiringReport


def analyze_summary(summary: GitHubSummary) -> AnalysisPayload:
    """Attach a Web3 detection to every repo and aggregate."""
    repos = []
    for repo in summary.repos:
        content = summary.repo_contents.get(repo.name)
        repos.append(RepoAnalysis(repo=repo, content=content, web3_detection=detect_web3(repo, content)))
    return build_analysis_payload(summary.profile, repos)


async def run_analysis(username: str, github: GitHubClient, generator: ReportGenerator) -> AnalysisResult:
    summary = await github.collect_summary(username)
    payload = analyze_summary(summary)
    logger.info(
        f"Payload for {username}: {payload.aggregate_stats.total_repos} repos, "
        f"{payload.aggregate_stats.web3_repo_count} Web3"
    )
    report = await generator.generate(payload)
    return AnalysisResult(summary=summary, payload=payload, report=report)
