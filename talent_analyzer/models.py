"""
SQLAlchemy models for the Talent Analyzer
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """One generated hiring report"""
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, index=True)  # lower-cased
    profile_url = Column(String, nullable=False)
    report = Column(Text, nullable=False)  # JSON: HiringReport
    raw_data = Column(Text, nullable=False)  # JSON: profile, repos, stats
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Analysis(id={self.id}, username='{self.username}')>"
