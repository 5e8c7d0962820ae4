"""
Hiring report generation with Gemini structured output.
"""

import json
import logging
import os
from typing import Any, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from ..config import DEFAULT_GEMINI_MODEL
from ..errors import ReportGenerationError
from ..schemas import WEB3_ROLES, AnalysisPayload, HiringReport, RoleFit
from .prompts import HIRING_REPORT_SCHEMA, SYSTEM_INSTRUCTION, build_prompt

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
MAX_OUTPUT_TOKENS = 4000
REQUEST_TIMEOUT_MS = 30_000

SOLIDITY_TOOLCHAIN = frozenset({
    "solidity", "hardhat", "foundry", "truffle", "brownie", "@openzeppelin/contracts",
})


# =============================================================================
# EVIDENCE RULES
# =============================================================================

def _has_solidity_evidence(payload: AnalysisPayload) -> bool:
    if "Solidity" in payload.aggregate_stats.language_breakdown:
        return True
    for item in payload.repos:
        if item.repo.language == "Solidity":
            return True
        if any(topic.lower() == "solidity" for topic in item.repo.topics):
            return True
        if item.content and SOLIDITY_TOOLCHAIN.intersection(item.content.web3_frameworks):
            return True
    return False


def _has_web3_evidence(payload: AnalysisPayload) -> bool:
    if payload.aggregate_stats.web3_repo_count > 0:
        return True
    return any(item.content and item.content.web3_frameworks for item in payload.repos)


def _has_ci_evidence(payload: AnalysisPayload) -> bool:
    return any(item.content and item.content.has_ci for item in payload.repos)


def enforce_role_fit_evidence(report: HiringReport, payload: AnalysisPayload) -> HiringReport:
    """
    Zero out role-fit scores the payload gives no direct evidence for.

    Solidity needs Solidity code, topics or toolchain; Web3 roles need at
    least one Web3 signal; DevOps needs CI configuration.
    """
    unsupported: dict[str, str] = {}
    if not _has_solidity_evidence(payload):
        unsupported["Solidity"] = "No Solidity code, topics or toolchain found"
    if not _has_web3_evidence(payload):
        for role in WEB3_ROLES:
            unsupported[role] = "No Web3 technologies found"
    if not _has_ci_evidence(payload):
        unsupported["DevOps"] = "No CI/CD configuration found"

    role_fit: list[RoleFit] = []
    for fit in report.hiring_recommendation.role_fit:
        reason = unsupported.get(fit.role)
        if reason and fit.fit_score > 0:
            logger.warning(
                f"Model scored {fit.role} at {fit.fit_score} without evidence for "
                f"{report.profile.username}; forcing 0"
            )
            fit = fit.model_copy(update={"fit_score": 0.0, "notes": [*fit.notes, reason]})
        role_fit.append(fit)

    recommendation = report.hiring_recommendation.model_copy(update={"role_fit": role_fit})
    return report.model_copy(update={"hiring_recommendation": recommendation})


# =============================================================================
# GENERATOR
# =============================================================================

class ReportGenerator:
    """Calls the model once per payload; failures are not retried."""

    def __init__(
        self,
        client: Optional[Any] = None,
        model: str = DEFAULT_GEMINI_MODEL,
        api_key: Optional[str] = None,
    ):
        self.client = client or genai.Client(api_key=api_key or os.getenv("GEMINI_API_KEY"))
        self.model = model

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=HIRING_REPORT_SCHEMA,
            temperature=TEMPERATURE,
            max_output_tokens=MAX_OUTPUT_TOKENS,
            http_options=types.HttpOptions(timeout=REQUEST_TIMEOUT_MS),
        )

    async def generate(self, payload: AnalysisPayload) -> HiringReport:
        prompt = build_prompt(payload)
        username = payload.profile.login

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self._config(),
            )
        except Exception as e:
            logger.error(f"Gemini call failed for {username}: {e}")
            raise ReportGenerationError(f"Failed to generate hiring report: {e}") from e

        text = (response.text or "").strip().replace("```json", "").replace("```", "").strip()
        if not text:
            raise ReportGenerationError("Failed to generate hiring report: empty model response")

        try:
            report = HiringReport.model_validate(json.loads(text))
        except json.JSONDecodeError as e:
            logger.error(f"Unparseable model response for {username}: {e}")
            raise ReportGenerationError(f"Failed to parse hiring report: {e}") from e
        except ValidationError as e:
            logger.error(f"Model response failed schema validation for {username}: {e}")
            raise ReportGenerationError("Hiring report did not match the expected schema") from e

        return enforce_role_fit_evidence(report, payload)
