"""
Payload Builder

Reduces the analysed repositories into aggregate statistics and shapes the
payload sent to the report model. Pure function over already-fetched data.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from ..schemas import AggregateStats, AnalysisPayload, Profile, RepoAnalysis
from ..services.metrics import MetricsCalculator


def build_analysis_payload(
    profile: Profile,
    repos: list[RepoAnalysis],
    now: Optional[datetime] = None,
) -> AnalysisPayload:
    """
    Build the model payload for one profile.

    Args:
        profile: Profile snapshot
        repos: (repo, content, detection) triples in ranked order
        now: Reference time for recency/age; defaults to the current UTC time

    Returns:
        AnalysisPayload with aggregate statistics attached
    """
    now = now or datetime.now(timezone.utc)

    language_breakdown: Counter[str] = Counter()
    topics_breakdown: Counter[str] = Counter()
    total_stars = 0
    total_forks = 0
    web3_repo_count = 0

    for item in repos:
        repo = item.repo
        total_stars += repo.stargazers_count
        total_forks += repo.forks_count
        language_breakdown.update(repo.languages)
        # Each topic counts once per repo
        topics_breakdown.update(dict.fromkeys(repo.topics, 1))

        if item.web3_detection is not None and item.web3_detection.is_web3:
            web3_repo_count += 1

    total_repos = len(repos)
    web3_ratio = web3_repo_count / total_repos if total_repos else 0.0

    stats = AggregateStats(
        total_stars=total_stars,
        total_forks=total_forks,
        total_repos=total_repos,
        language_breakdown=dict(language_breakdown),
        topics_breakdown=dict(topics_breakdown),
        web3_repo_count=web3_repo_count,
        web3_ratio=web3_ratio,
        recency_score=MetricsCalculator.recency_score((r.repo.pushed_at for r in repos), now),
        consistency_score=MetricsCalculator.consistency_score(r.repo.updated_at for r in repos),
        avg_repo_age=MetricsCalculator.avg_repo_age((r.repo.created_at for r in repos), now),
    )

    return AnalysisPayload(profile=profile, repos=repos, aggregate_stats=stats)
