"""
Talent Analyzer Schema Definitions

Pydantic models for the GitHub data we collect, the payload sent to the
model, the hiring report it returns, and the API request/response bodies.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def clamp_score(value: float) -> float:
    """Clamp a score into 0-100."""
    return max(0.0, min(100.0, value))


Score = Annotated[float, AfterValidator(clamp_score)]


# =============================================================================
# ENUMS
# =============================================================================

class Confidence(str, Enum):
    """Confidence tier for Web3 detection"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


TestingCILevel = Literal["strong", "some", "none", "unknown"]
RepoImportance = Literal["high", "medium", "low"]
HiringVerdict = Literal["STRONG_YES", "YES", "MAYBE", "NO"]
RoleName = Literal[
    "Web3 Frontend",
    "Solidity",
    "Full-stack Web3",
    "Backend",
    "DevOps",
    "Generalist",
]

ROLE_NAMES: tuple[str, ...] = RoleName.__args__
WEB3_ROLES = ("Web3 Frontend", "Full-stack Web3")


# =============================================================================
# GITHUB DATA
# =============================================================================

class Profile(BaseModel):
    """Public account metadata, fetched once per analysis"""
    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    bio: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    blog: Optional[str] = None
    email: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Repository(BaseModel):
    """One public repository as returned by the REST API"""
    name: str
    full_name: str
    html_url: Optional[str] = None
    description: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    language: Optional[str] = None
    languages: dict[str, int] = Field(default_factory=dict, description="Language -> bytes mapping")
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0
    default_branch: str = "main"
    license: Optional[str] = Field(None, description="SPDX identifier")
    pushed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    size: int = 0
    archived: bool = False
    disabled: bool = False
    fork: bool = False
    is_template: bool = False
    has_issues: bool = False
    has_projects: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    visibility: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict[str, Any], languages: Optional[dict[str, int]] = None) -> "Repository":
        """Build from a /users/{user}/repos item."""
        license_info = data.get("license") or {}
        return cls(
            name=data["name"],
            full_name=data["full_name"],
            html_url=data.get("html_url"),
            description=data.get("description"),
            topics=data.get("topics") or [],
            language=data.get("language"),
            languages=languages or {},
            stargazers_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            watchers_count=data.get("watchers_count") or 0,
            open_issues_count=data.get("open_issues_count") or 0,
            default_branch=data.get("default_branch") or "main",
            license=license_info.get("spdx_id"),
            pushed_at=data.get("pushed_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            size=data.get("size") or 0,
            archived=bool(data.get("archived")),
            disabled=bool(data.get("disabled")),
            fork=bool(data.get("fork")),
            is_template=bool(data.get("is_template")),
            has_issues=bool(data.get("has_issues")),
            has_projects=bool(data.get("has_projects")),
            has_wiki=bool(data.get("has_wiki")),
            has_pages=bool(data.get("has_pages")),
            visibility=data.get("visibility"),
        )


class RepoContent(BaseModel):
    """Content signals probed for a bounded subset of repositories"""
    readme: Optional[str] = None
    manifest: Optional[dict[str, Any]] = Field(None, description="Parsed package.json, if any")
    has_tests: bool = False
    has_ci: bool = False
    has_lint_config: bool = False
    has_solidity_contracts: bool = False
    web3_frameworks: list[str] = Field(default_factory=list)


class Web3Detection(BaseModel):
    """Heuristic Web3 verdict for one repository"""
    is_web3: bool
    detected_stacks: list[str] = Field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    evidence: list[str] = Field(default_factory=list)


class GitHubSummary(BaseModel):
    """Everything fetched from GitHub for one analysis"""
    profile: Profile
    repos: list[Repository] = Field(default_factory=list)
    repo_contents: dict[str, RepoContent] = Field(default_factory=dict, description="Repo name -> content")


# =============================================================================
# MODEL PAYLOAD
# =============================================================================

class RepoAnalysis(BaseModel):
    repo: Repository
    content: Optional[RepoContent] = None
    web3_detection: Optional[Web3Detection] = None


class AggregateStats(BaseModel):
    total_stars: int = 0
    total_forks: int = 0
    total_repos: int = 0
    language_breakdown: dict[str, int] = Field(default_factory=dict)
    topics_breakdown: dict[str, int] = Field(default_factory=dict)
    web3_repo_count: int = 0
    web3_ratio: float = Field(0.0, ge=0, le=1)
    recency_score: int = Field(0, ge=0, le=100)
    consistency_score: int = Field(50, ge=0, le=100)
    avg_repo_age: int = Field(0, ge=0, description="Mean repository age in days")


class AnalysisPayload(BaseModel):
    """Input to the report model, built fresh per request"""
    profile: Profile
    repos: list[RepoAnalysis] = Field(default_factory=list)
    aggregate_stats: AggregateStats


# =============================================================================
# HIRING REPORT (model output)
# =============================================================================

class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ReportProfile(StrictModel):
    username: str
    display_name: str
    headline: str
    quick_summary: str


class Scores(StrictModel):
    overall: Score
    engineering: Score
    web3: Score
    consistency: Score
    maintainability: Score
    risk: Score = Field(..., description="Higher = more hiring risk")
    confidence: Score


class NotableWeb3Repo(StrictModel):
    name: str
    reason: str
    stack: list[str]
    evidence: list[str]


class Web3Assessment(StrictModel):
    web3_repo_count: int = Field(..., ge=0)
    key_stacks: list[str]
    notable_web3_repos: list[NotableWeb3Repo]


class TestingAndCI(StrictModel):
    tests_present: TestingCILevel
    ci_present: TestingCILevel
    notes: list[str]


class EngineeringAssessment(StrictModel):
    strengths: list[str]
    weaknesses: list[str]
    code_quality_signals: list[str]
    testing_and_ci: TestingAndCI


class RepoInsight(StrictModel):
    name: str
    importance: RepoImportance
    summary: str
    signals: list[str]
    red_flags: list[str]


class RoleFit(StrictModel):
    role: RoleName
    fit_score: Score
    notes: list[str]


class HiringRecommendation(StrictModel):
    verdict: HiringVerdict
    rationale: list[str]
    role_fit: list[RoleFit]


class InterviewQuestion(StrictModel):
    category: str
    question: str
    why_this_question: str
    expected_good_answer_signals: list[str]


class InterviewPlan(StrictModel):
    focus_areas: list[str]
    questions: list[InterviewQuestion]
    take_home_task_ideas: list[str]


class DueDiligence(StrictModel):
    things_to_verify: list[str]
    missing_info: list[str]


class HiringReport(StrictModel):
    """Validated model output; the unit cached and persisted"""
    profile: ReportProfile
    scores: Scores
    web3_assessment: Web3Assessment
    engineering_assessment: EngineeringAssessment
    repo_insights: list[RepoInsight]
    hiring_recommendation: HiringRecommendation
    interview_plan: InterviewPlan
    due_diligence: DueDiligence


# =============================================================================
# API MODELS
# =============================================================================

class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze"""
    profile_url: str = Field(..., description="GitHub profile URL or bare username")


class ProfileSnapshot(BaseModel):
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    public_repos: int = 0
    followers: int = 0


class RawSummary(BaseModel):
    """Supporting numbers returned alongside a fresh report"""
    profile_summary: ProfileSnapshot
    stats: AggregateStats
    web3_repos: dict[str, Web3Detection] = Field(default_factory=dict)


class AnalyzeResponse(BaseModel):
    report: HiringReport
    cached: bool
    username: str
    analysis_id: Optional[int] = None
    raw: Optional[RawSummary] = None


class StoredAnalysisResponse(BaseModel):
    report: HiringReport
    username: str
    profile_url: str
    created_at: datetime
    analysis_id: int
    cached: bool = True


class HistoryItem(BaseModel):
    id: int
    username: str
    display_name: str
    headline: str
    verdict: HiringVerdict
    overall_score: float
    web3_score: float
    created_at: datetime


class HistoryResponse(BaseModel):
    analyses: list[HistoryItem]
    total: int
