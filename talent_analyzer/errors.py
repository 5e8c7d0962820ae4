"""
Error types raised by the analysis pipeline.

Each error maps to one HTTP status in main.py. Partial fetch failures never
surface as errors; the GitHub client logs and downgrades them itself.
"""

from typing import Optional


class AnalyzerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidProfileError(AnalyzerError):
    """The profile reference could not be turned into a GitHub username."""

    status_code = 400


class GitHubAPIError(AnalyzerError):
    """Non-2xx response from the GitHub REST API."""

    def __init__(self, message: str = "GitHub API error", status_code: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = status_code


class GitHubNotFoundError(GitHubAPIError):
    """The requested user or resource does not exist (404)."""

    status_code = 404

    def __init__(self, message: str = "User or resource not found"):
        super().__init__(message, status_code=404)


class GitHubRateLimitError(GitHubAPIError):
    """GitHub refused the request (403), usually an exhausted token quota."""

    status_code = 503

    def __init__(self, message: str = "Rate limit exceeded or forbidden", remaining: int = 0):
        super().__init__(message, status_code=403)
        self.remaining = remaining


class RateLimitExceededError(AnalyzerError):
    """The calling client used up its local request quota."""

    status_code = 429

    def __init__(self, reset_at: float, limit: int):
        super().__init__("Too many requests. Please try again later.")
        self.reset_at = reset_at
        self.limit = limit


class ReportGenerationError(AnalyzerError):
    """The model call failed or returned unusable output."""

    status_code = 500


class AnalysisTimeoutError(AnalyzerError):
    """The analysis pipeline did not finish within its time limit."""

    status_code = 504
