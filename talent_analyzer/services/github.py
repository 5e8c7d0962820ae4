"""
GitHub REST client.

Fetches the profile, its repositories and per-repository content signals.
Only the profile and repository list are critical; every other sub-fetch
is logged and downgraded to an empty value when it fails.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, Optional

import httpx

from ..config import GITHUB_RESPONSE_TTL_SECONDS, MAX_CONTENT_REPOS, MAX_REPOS
from ..errors import GitHubAPIError, GitHubNotFoundError, GitHubRateLimitError
from ..schemas import GitHubSummary, Profile, RepoContent, Repository
from .cache import TTLCache

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

README_FILENAMES = ("README.md", "README.MD", "readme.md", "README")
MANIFEST_FILENAME = "package.json"
TEST_PATHS = ("test", "tests", "__tests__", "spec")
CI_PATHS = (".github/workflows", ".gitlab-ci.yml", ".travis.yml", ".circleci")
LINT_PATHS = (".eslintrc.js", ".eslintrc.json", ".prettierrc", "biome.json")
LINT_DEV_DEPENDENCIES = ("eslint", "prettier")
CONTRACT_PATHS = ("contracts", "src")

WEB3_DEPENDENCIES = (
    "hardhat",
    "ethers",
    "web3",
    "wagmi",
    "viem",
    "@openzeppelin/contracts",
    "@thegraph/graph-cli",
    "@solana/web3.js",
    "@project-serum/anchor",
    "near-api-js",
    "@polkadot/api",
    "truffle",
)

# Config file -> framework it implies
WEB3_CONFIG_FILES = {
    "hardhat.config.js": "hardhat",
    "hardhat.config.ts": "hardhat",
    "foundry.toml": "foundry",
    "truffle-config.js": "truffle",
    "brownie-config.yaml": "brownie",
    "Anchor.toml": "anchor",
}


def repo_priority(repo: Repository) -> int:
    """Stars count double; original (non-fork) work gets a flat bonus."""
    return repo.stargazers_count * 2 + (0 if repo.fork else 5)


def _dependency_map(manifest: Optional[dict[str, Any]], section: str) -> dict[str, Any]:
    if not manifest:
        return {}
    deps = manifest.get(section)
    return deps if isinstance(deps, dict) else {}


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
        response_ttl: float = GITHUB_RESPONSE_TTL_SECONDS,
    ):
        self.token = token or os.getenv("GITHUB_TOKEN")
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        self._client = httpx.AsyncClient(
            base_url=GITHUB_API_BASE,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )
        # Short-lived response cache so bursts of requests for the same
        # profile do not repeat upstream calls
        self._responses: TTLCache[Any] = TTLCache(max_size=500, ttl_seconds=response_ttl)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        request = self._client.build_request("GET", path, params=params)
        cache_key = str(request.url)
        cached = self._responses.get(cache_key)
        if cached is not None:
            return cached

        response = await self._client.send(request)

        if response.status_code == 404:
            raise GitHubNotFoundError()
        if response.status_code == 403:
            remaining = response.headers.get("x-ratelimit-remaining")
            raise GitHubRateLimitError(remaining=int(remaining) if remaining and remaining.isdigit() else 0)
        if not response.is_success:
            raise GitHubAPIError(f"GitHub API error: {response.reason_phrase}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise GitHubAPIError(f"GitHub API returned invalid JSON: {e}", response.status_code) from e
        self._responses.set(cache_key, data)
        return data

    # -------------------------------------------------------------------------
    # Profile and repositories
    # -------------------------------------------------------------------------

    async def fetch_profile(self, username: str) -> Profile:
        data = await self._get(f"/users/{username}")
        return Profile.model_validate(data)

    async def fetch_repos(self, username: str, max_repos: int = MAX_REPOS) -> list[Repository]:
        """
        Fetch the most recently updated repos, then rank them by priority.

        Language breakdown failures are non-fatal: the repo keeps an empty
        language map.
        """
        per_page = min(max_repos, 100)
        raw_repos: list[dict[str, Any]] = []
        page = 1
        while len(raw_repos) < max_repos:
            batch = await self._get(
                f"/users/{username}/repos",
                params={"sort": "updated", "direction": "desc", "per_page": per_page, "page": page},
            )
            raw_repos.extend(batch)
            if len(batch) < per_page:
                break
            page += 1

        repos = []
        for data in raw_repos[:max_repos]:
            languages: dict[str, int] = {}
            try:
                languages = await self._get(f"/repos/{data['full_name']}/languages")
            except (GitHubAPIError, httpx.HTTPError) as e:
                logger.warning(f"Failed to fetch languages for {data['full_name']}: {e}")
            repos.append(Repository.from_api(data, languages))

        repos.sort(key=repo_priority, reverse=True)
        return repos[:max_repos]

    # -------------------------------------------------------------------------
    # Content probes
    # -------------------------------------------------------------------------

    async def _fetch_file_content(self, full_name: str, path: str, branch: str) -> Optional[str]:
        try:
            data = await self._get(f"/repos/{full_name}/contents/{path}", params={"ref": branch})
        except (GitHubAPIError, httpx.HTTPError):
            return None

        # Directories come back as lists
        if isinstance(data, dict) and data.get("content") and data.get("encoding") == "base64":
            try:
                return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError):
                logger.warning(f"Undecodable content for {full_name}/{path}")
        return None

    async def _path_exists(self, full_name: str, path: str, branch: str) -> bool:
        try:
            await self._get(f"/repos/{full_name}/contents/{path}", params={"ref": branch})
            return True
        except (GitHubAPIError, httpx.HTTPError):
            return False

    async def _any_path_exists(self, full_name: str, paths: tuple[str, ...], branch: str) -> bool:
        for path in paths:
            if await self._path_exists(full_name, path, branch):
                return True
        return False

    async def fetch_repo_content(self, repo: Repository) -> RepoContent:
        full_name, branch = repo.full_name, repo.default_branch

        readme = None
        for filename in README_FILENAMES:
            readme = await self._fetch_file_content(full_name, filename, branch)
            if readme:
                break

        manifest = None
        manifest_text = await self._fetch_file_content(full_name, MANIFEST_FILENAME, branch)
        if manifest_text:
            try:
                parsed = json.loads(manifest_text)
                manifest = parsed if isinstance(parsed, dict) else None
            except json.JSONDecodeError:
                logger.warning(f"Failed to parse {MANIFEST_FILENAME} for {full_name}")

        dependencies = _dependency_map(manifest, "dependencies")
        dev_dependencies = _dependency_map(manifest, "devDependencies")

        has_tests = await self._any_path_exists(full_name, TEST_PATHS, branch)
        has_ci = await self._any_path_exists(full_name, CI_PATHS, branch)
        has_lint_config = (
            await self._any_path_exists(full_name, LINT_PATHS, branch)
            or any(dev_dependencies.get(name) is not None for name in LINT_DEV_DEPENDENCIES)
        )
        has_solidity_contracts = await self._any_path_exists(full_name, CONTRACT_PATHS, branch)

        web3_frameworks = [
            dep for dep in WEB3_DEPENDENCIES
            if dependencies.get(dep) or dev_dependencies.get(dep)
        ]
        for filename, framework in WEB3_CONFIG_FILES.items():
            if framework in web3_frameworks:
                continue
            if await self._path_exists(full_name, filename, branch):
                web3_frameworks.append(framework)

        return RepoContent(
            readme=readme,
            manifest=manifest,
            has_tests=has_tests,
            has_ci=has_ci,
            has_lint_config=has_lint_config,
            has_solidity_contracts=has_solidity_contracts,
            web3_frameworks=web3_frameworks,
        )

    # -------------------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------------------

    async def collect_summary(
        self,
        username: str,
        max_repos: int = MAX_REPOS,
        max_content_repos: int = MAX_CONTENT_REPOS,
    ) -> GitHubSummary:
        """
        Profile, ranked repos, and content for the top original repos.

        A content failure for one repo is logged and that repo proceeds
        without content.
        """
        profile = await self.fetch_profile(username)
        repos = await self.fetch_repos(username, max_repos)

        top_repos = [r for r in repos if not r.fork and not r.archived][:max_content_repos]
        repo_contents: dict[str, RepoContent] = {}
        for repo in top_repos:
            try:
                repo_contents[repo.name] = await self.fetch_repo_content(repo)
            except Exception as e:
                logger.warning(f"Failed to fetch content for {repo.full_name}: {e}")

        logger.info(
            f"Collected {len(repos)} repos for {username} "
            f"({len(repo_contents)} with content)"
        )
        return GitHubSummary(profile=profile, repos=repos, repo_contents=repo_contents)
