import json
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .models import Analysis, Base
from .pipeline import AnalysisResult

load_dotenv()

logger = logging.getLogger(__name__)

# Database URL - Prefer Env, default to local database.db
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./database.db")

# Engine
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)

# SessionLocal
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def save_analysis(session: Session, username: str, profile_url: str, result: AnalysisResult) -> Optional[int]:
    """
    Persist a fresh report. Best effort: failures are logged and None is
    returned so the caller can still answer the request.
    """
    raw_data = {
        "profile": result.summary.profile.model_dump(mode="json"),
        "repos": [repo.model_dump(mode="json") for repo in result.summary.repos],
        "aggregate_stats": result.payload.aggregate_stats.model_dump(mode="json"),
        "web3_repos": {
            item.repo.name: item.web3_detection.model_dump(mode="json")
            for item in result.payload.repos
            if item.web3_detection and item.web3_detection.is_web3
        },
    }
    try:
        analysis = Analysis(
            username=username.lower(),
            profile_url=profile_url,
            report=result.report.model_dump_json(),
            raw_data=json.dumps(raw_data),
        )
        session.add(analysis)
        session.commit()
        session.refresh(analysis)
        return analysis.id
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database save error for {username}: {e}")
        return None
