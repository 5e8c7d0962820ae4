"""
Pytest configuration for Talent Analyzer tests
"""

import copy
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

# Credentials and database must be set before the app modules are imported
os.environ.setdefault("GITHUB_TOKEN", "test-github-token")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from talent_analyzer.models import Base  # noqa: E402
from talent_analyzer.schemas import (  # noqa: E402
    GitHubSummary,
    Profile,
    RepoContent,
    Repository,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeGeminiClient:
    """Mimics `genai.Client` far enough for `client.aio.models.generate_content`."""

    def __init__(self, text=None, error=None):
        self.models = FakeModels(text=text, error=error)
        self.aio = SimpleNamespace(models=self.models)


ROLE_SCORES = {
    "Web3 Frontend": 70,
    "Solidity": 80,
    "Full-stack Web3": 75,
    "Backend": 60,
    "DevOps": 40,
    "Generalist": 65,
}

SAMPLE_REPORT = {
    "profile": {
        "username": "alice",
        "display_name": "Alice Chain",
        "headline": "Solidity developer building DeFi tooling",
        "quick_summary": "Ships Hardhat projects with tests and CI.",
    },
    "scores": {
        "overall": 78,
        "engineering": 72,
        "web3": 85,
        "consistency": 60,
        "maintainability": 70,
        "risk": 25,
        "confidence": 65,
    },
    "web3_assessment": {
        "web3_repo_count": 1,
        "key_stacks": ["solidity", "hardhat"],
        "notable_web3_repos": [
            {
                "name": "vault",
                "reason": "ERC-4626 vault with Hardhat tests",
                "stack": ["solidity", "hardhat"],
                "evidence": ["Topics: solidity", "Frameworks: hardhat"],
            }
        ],
    },
    "engineering_assessment": {
        "strengths": ["Tests present in vault"],
        "weaknesses": ["Few repositories"],
        "code_quality_signals": ["GitHub Actions workflow"],
        "testing_and_ci": {
            "tests_present": "some",
            "ci_present": "some",
            "notes": ["vault has a tests directory"],
        },
    },
    "repo_insights": [
        {
            "name": "vault",
            "importance": "high",
            "summary": "Tokenized vault contracts",
            "signals": ["hardhat.config.ts"],
            "red_flags": [],
        }
    ],
    "hiring_recommendation": {
        "verdict": "YES",
        "rationale": ["Demonstrated Solidity work"],
        "role_fit": [
            {"role": role, "fit_score": score, "notes": []}
            for role, score in ROLE_SCORES.items()
        ],
    },
    "interview_plan": {
        "focus_areas": ["Smart contract security"],
        "questions": [
            {
                "category": "Web3 Knowledge",
                "question": "How does vault handle share price rounding?",
                "why_this_question": "Rounding errors are a common vault exploit",
                "expected_good_answer_signals": ["Mentions rounding direction"],
            }
        ],
        "take_home_task_ideas": ["Add a withdrawal queue to vault"],
    },
    "due_diligence": {
        "things_to_verify": ["Authorship of vault contracts"],
        "missing_info": ["Professional experience"],
    },
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter_clock(clock, monkeypatch):
    """Drives `limits` MemoryStorage expiry from the fake clock."""
    import limits.storage.memory

    monkeypatch.setattr(limits.storage.memory, "time", SimpleNamespace(time=clock))
    return clock


@pytest.fixture
def report_data():
    """Fresh, mutable copy of a valid hiring report."""
    return copy.deepcopy(SAMPLE_REPORT)


@pytest.fixture
def gemini_factory():
    def make(text=None, error=None):
        return FakeGeminiClient(text=text, error=error)
    return make


@pytest.fixture
def db_session():
    """In-memory SQLite session shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def make_repo(name: str, **overrides) -> Repository:
    fields = {
        "name": name,
        "full_name": f"alice/{name}",
        "pushed_at": NOW - timedelta(days=10),
        "created_at": NOW - timedelta(days=100),
        "updated_at": NOW - timedelta(days=10),
    }
    fields.update(overrides)
    return Repository(**fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def repo_factory():
    return make_repo


@pytest.fixture
def web3_summary():
    """Profile with one Solidity repo (tests and CI present) and one plain repo."""
    vault = make_repo(
        "vault",
        language="Solidity",
        languages={"Solidity": 5000, "TypeScript": 1200},
        topics=["solidity", "defi"],
        stargazers_count=12,
    )
    notes = make_repo("notes", language="Python", languages={"Python": 800})
    return GitHubSummary(
        profile=Profile(login="alice", name="Alice Chain", public_repos=2, followers=4),
        repos=[vault, notes],
        repo_contents={
            "vault": RepoContent(
                readme="# Vault\nAn ethereum smart contract vault for defi.",
                has_tests=True,
                has_ci=True,
                has_solidity_contracts=True,
                web3_frameworks=["hardhat"],
            ),
        },
    )
