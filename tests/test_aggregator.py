"""Tests for payload aggregation and activity metrics"""

from datetime import timedelta

import pytest

from talent_analyzer.analyzers import build_analysis_payload, detect_web3
from talent_analyzer.schemas import Confidence, Profile, RepoAnalysis
from talent_analyzer.services.metrics import MetricsCalculator

PROFILE = Profile(login="alice")


def analysed(repo, content=None):
    return RepoAnalysis(repo=repo, content=content, web3_detection=detect_web3(repo, content))


def test_empty_repo_list(now):
    stats = build_analysis_payload(PROFILE, [], now=now).aggregate_stats

    assert stats.total_repos == 0
    assert stats.web3_ratio == 0.0
    assert stats.recency_score == 0
    assert stats.consistency_score == 50
    assert stats.avg_repo_age == 0


def test_aggregates_mixed_profile(repo_factory, now):
    repos = [
        analysed(repo_factory("vault", topics=["solidity"], language="Solidity", stargazers_count=5, forks_count=1,
                              languages={"Solidity": 300, "JavaScript": 100})),
        analysed(repo_factory("site", language="JavaScript", languages={"JavaScript": 50}, stargazers_count=2)),
        analysed(repo_factory("notes", language="JavaScript", languages={"JavaScript": 20})),
    ]

    payload = build_analysis_payload(PROFILE, repos, now=now)
    stats = payload.aggregate_stats

    assert stats.total_repos == 3
    assert stats.total_stars == 7
    assert stats.total_forks == 1
    assert stats.web3_repo_count == 1
    assert stats.web3_ratio == pytest.approx(1 / 3)
    assert stats.topics_breakdown == {"solidity": 1}
    assert stats.language_breakdown == {"Solidity": 300, "JavaScript": 170}
    assert [item.repo.name for item in payload.repos] == ["vault", "site", "notes"]
    assert payload.repos[0].web3_detection.confidence == Confidence.MEDIUM


def test_web3_ratio_all_web3(repo_factory, now):
    repos = [analysed(repo_factory(f"r{i}", language="Solidity")) for i in range(2)]
    stats = build_analysis_payload(PROFILE, repos, now=now).aggregate_stats
    assert stats.web3_repo_count == 2
    assert stats.web3_ratio == 1.0


def test_topics_counted_once_per_repo(repo_factory, now):
    repos = [
        analysed(repo_factory("a", topics=["defi", "defi", "nft"])),
        analysed(repo_factory("b", topics=["defi"])),
    ]
    stats = build_analysis_payload(PROFILE, repos, now=now).aggregate_stats
    assert stats.topics_breakdown == {"defi": 2, "nft": 1}


def test_repos_without_detection_are_not_web3(repo_factory, now):
    repos = [RepoAnalysis(repo=repo_factory("vault", language="Solidity"))]
    stats = build_analysis_payload(PROFILE, repos, now=now).aggregate_stats
    assert stats.web3_repo_count == 0


@pytest.mark.parametrize("days, expected", [
    (15, 100),
    (60, 80),
    (120, 60),
    (200, 40),
    (1000, 20),
])
def test_recency_buckets(now, days, expected):
    assert MetricsCalculator.recency_score([now - timedelta(days=days)], now) == expected


def test_recency_averages_and_skips_missing_dates(now):
    dates = [now - timedelta(days=10), None, now - timedelta(days=110)]
    # average of 10 and 110 days is 60
    assert MetricsCalculator.recency_score(dates, now) == 80


def test_recency_with_no_dates_is_zero(now):
    assert MetricsCalculator.recency_score([None], now) == 0


def test_consistency_neutral_with_fewer_than_two_dates(now):
    assert MetricsCalculator.consistency_score([]) == 50
    assert MetricsCalculator.consistency_score([now]) == 50


def test_consistency_neutral_when_all_updates_coincide(now):
    assert MetricsCalculator.consistency_score([now, now, now]) == 50


def test_consistency_perfectly_regular(now):
    dates = [now - timedelta(days=7 * i) for i in range(5)]
    assert MetricsCalculator.consistency_score(dates) == 100


def test_consistency_irregular_is_lower_and_bounded(now):
    dates = [now, now - timedelta(days=1), now - timedelta(days=2), now - timedelta(days=400)]
    score = MetricsCalculator.consistency_score(dates)
    assert 0 <= score < 100


def test_consistency_ignores_input_order(now):
    dates = [now - timedelta(days=d) for d in (3, 40, 1, 90)]
    assert MetricsCalculator.consistency_score(dates) == MetricsCalculator.consistency_score(sorted(dates))


def test_avg_repo_age(now):
    dates = [now - timedelta(days=10), now - timedelta(days=20)]
    assert MetricsCalculator.avg_repo_age(dates, now) == 15


def test_naive_datetimes_treated_as_utc(now):
    naive = (now - timedelta(days=15)).replace(tzinfo=None)
    assert MetricsCalculator.recency_score([naive], now) == 100
