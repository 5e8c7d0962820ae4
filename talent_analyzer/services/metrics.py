from datetime import datetime, timezone
from statistics import fmean, pstdev
from typing import Iterable, Optional

SECONDS_PER_DAY = 60 * 60 * 24

# (upper bound in days, score); anything older scores RECENCY_FLOOR
RECENCY_BUCKETS = ((30, 100), (90, 80), (180, 60), (365, 40))
RECENCY_FLOOR = 20

# Score when variability cannot be assessed
NEUTRAL_CONSISTENCY = 50


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _days_between(earlier: datetime, later: datetime) -> float:
    return (_as_utc(later) - _as_utc(earlier)).total_seconds() / SECONDS_PER_DAY


class MetricsCalculator:

    @staticmethod
    def recency_score(pushed_dates: Iterable[Optional[datetime]], now: datetime) -> int:
        """Bucket the average days since last push; 0 with no push dates."""
        days = [_days_between(d, now) for d in pushed_dates if d is not None]
        if not days:
            return 0

        avg_days = fmean(days)
        for limit, score in RECENCY_BUCKETS:
            if avg_days < limit:
                return score
        return RECENCY_FLOOR

    @staticmethod
    def consistency_score(updated_dates: Iterable[Optional[datetime]]) -> int:
        """
        Regularity of repository updates.

        Sorts update timestamps, takes successive gaps and scores the
        coefficient of variation: 100 - cv * 50, floored at 0.
        """
        timestamps = sorted(_as_utc(d).timestamp() for d in updated_dates if d is not None)
        if len(timestamps) < 2:
            return NEUTRAL_CONSISTENCY

        gaps = [b - a for a, b in zip(timestamps, timestamps[1:])]
        mean_gap = fmean(gaps)
        if mean_gap == 0:
            # Every update at the same instant
            return NEUTRAL_CONSISTENCY

        cv = pstdev(gaps, mu=mean_gap) / mean_gap
        return max(0, round(100 - cv * 50))

    @staticmethod
    def avg_repo_age(created_dates: Iterable[Optional[datetime]], now: datetime) -> int:
        """Mean age in whole days; 0 when there is nothing to average."""
        ages = [_days_between(d, now) for d in created_dates if d is not None]
        if not ages:
            return 0
        return round(fmean(ages))
