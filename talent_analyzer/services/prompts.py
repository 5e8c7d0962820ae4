"""
Prompt and response schema for the hiring report model call.
"""

import json
from typing import Any

from ..schemas import ROLE_NAMES, AnalysisPayload

# README text is trimmed to keep the prompt bounded
MAX_README_CHARS = 3000

SYSTEM_INSTRUCTION = (
    "You are a technical recruiter specializing in Web3 and blockchain development. "
    "Generate structured hiring reports in valid JSON format."
)

INTERVIEW_CATEGORIES = (
    "Technical Skills",
    "Architecture/Design",
    "Problem Solving",
    "Web3 Knowledge",
    "Best Practices",
    "Project Experience",
)


# =============================================================================
# RESPONSE SCHEMA
# =============================================================================

def _string(enum: tuple[str, ...] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "STRING"}
    if enum:
        schema["enum"] = list(enum)
    return schema


def _score() -> dict[str, Any]:
    return {"type": "NUMBER", "minimum": 0, "maximum": 100}


def _strings() -> dict[str, Any]:
    return {"type": "ARRAY", "items": _string()}


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "ARRAY", "items": items}


def _object(properties: dict[str, Any]) -> dict[str, Any]:
    """Every property is required and emitted in declaration order."""
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": list(properties),
        "propertyOrdering": list(properties),
    }


TESTING_CI_LEVELS = ("strong", "some", "none", "unknown")

HIRING_REPORT_SCHEMA: dict[str, Any] = _object({
    "profile": _object({
        "username": _string(),
        "display_name": _string(),
        "headline": _string(),
        "quick_summary": _string(),
    }),
    "scores": _object({
        "overall": _score(),
        "engineering": _score(),
        "web3": _score(),
        "consistency": _score(),
        "maintainability": _score(),
        "risk": _score(),
        "confidence": _score(),
    }),
    "web3_assessment": _object({
        "web3_repo_count": {"type": "INTEGER", "minimum": 0},
        "key_stacks": _strings(),
        "notable_web3_repos": _array(_object({
            "name": _string(),
            "reason": _string(),
            "stack": _strings(),
            "evidence": _strings(),
        })),
    }),
    "engineering_assessment": _object({
        "strengths": _strings(),
        "weaknesses": _strings(),
        "code_quality_signals": _strings(),
        "testing_and_ci": _object({
            "tests_present": _string(TESTING_CI_LEVELS),
            "ci_present": _string(TESTING_CI_LEVELS),
            "notes": _strings(),
        }),
    }),
    "repo_insights": _array(_object({
        "name": _string(),
        "importance": _string(("high", "medium", "low")),
        "summary": _string(),
        "signals": _strings(),
        "red_flags": _strings(),
    })),
    "hiring_recommendation": _object({
        "verdict": _string(("STRONG_YES", "YES", "MAYBE", "NO")),
        "rationale": _strings(),
        "role_fit": _array(_object({
            "role": _string(ROLE_NAMES),
            "fit_score": _score(),
            "notes": _strings(),
        })),
    }),
    "interview_plan": _object({
        "focus_areas": _strings(),
        "questions": _array(_object({
            "category": _string(),
            "question": _string(),
            "why_this_question": _string(),
            "expected_good_answer_signals": _strings(),
        })),
        "take_home_task_ideas": _strings(),
    }),
    "due_diligence": _object({
        "things_to_verify": _strings(),
        "missing_info": _strings(),
    }),
})


# =============================================================================
# PROMPT
# =============================================================================

def serialize_payload(payload: AnalysisPayload) -> str:
    """JSON-encode the payload with README text trimmed."""
    data = payload.model_dump(mode="json")
    for item in data["repos"]:
        content = item.get("content")
        if content and content.get("readme") and len(content["readme"]) > MAX_README_CHARS:
            content["readme"] = content["readme"][:MAX_README_CHARS] + "\n[truncated]"
    return json.dumps(data, indent=2)


def build_prompt(payload: AnalysisPayload) -> str:
    return f"""You are a senior technical recruiter for a Web3 talent marketplace. Analyze the following GitHub profile data and generate a comprehensive hiring report.

PROFILE DATA:
{serialize_payload(payload)}

ANALYSIS INSTRUCTIONS:
1. You must ONLY use the provided GitHub data. Do not invent facts that are not present in the data.
2. If evidence is missing or insufficient, explicitly say "unknown" and lower the confidence score.
3. Cite concrete evidence for every claim: topic names, filenames, README content, package.json dependency names.
4. Assess Web3 relevance from: topics, Solidity code, Web3 frameworks (Hardhat, Foundry, ethers, wagmi, etc.), smart contract directories, DeFi/NFT projects.
5. Assess engineering quality from: project structure, tests, CI/CD, documentation, TypeScript usage, linting, repository maintenance.
6. Identify red flags: low activity, copied content, auto-generated repos, spam projects, abandoned repos.
7. Be professional and factual. Avoid defamatory language.

SCORING RUBRIC (all scores 0-100):
- overall: holistic assessment
- engineering: code quality, testing, structure
- web3: Web3 knowledge and experience
- consistency: regular activity and contributions
- maintainability: documentation, structure, best practices
- risk: higher = more hiring risk due to red flags
- confidence: how confident you are in this evaluation

ROLE FIT SCORING:
- Score each of these roles: {", ".join(ROLE_NAMES)}.
- If there is NO direct evidence of the skill a role needs, fit_score MUST be 0. No partial credit.
  * No Solidity code = 0 for Solidity
  * No Web3 technologies = 0 for Web3 Frontend and Full-stack Web3
  * No CI/CD evidence = 0 for DevOps
- Only give non-zero scores when there is actual evidence in the repos.

HIRING VERDICT:
- STRONG_YES: exceptional candidate, hire immediately
- YES: strong candidate, proceed with interview
- MAYBE: potential but needs verification
- NO: not a good fit or insufficient signal

INTERVIEW QUESTIONS:
- Generate 6-10 questions tailored to the candidate's actual repositories.
- Cover several categories: {", ".join(INTERVIEW_CATEGORIES)} (Web3 Knowledge only if applicable).
- For each question give why_this_question and expected_good_answer_signals.
- Be specific ("How did you implement X in your Y project?"), never generic ("Tell me about X").
- At least 2 questions must dig into the most impressive or relevant repositories.

TAKE-HOME TASKS:
- Suggest 2-4 take-home task ideas matched to the demonstrated skill level.

Return ONLY the JSON object that follows the response schema exactly."""
