"""
Web3 Heuristic Detector

Scores a single repository's Web3 relevance from four independent checks:
- Topics: repository topics matched against a fixed vocabulary
- Content: detected frameworks and Solidity contract directories
- README: keyword density (more than 2 distinct keywords required)
- Language: Solidity as the primary language

Pure function of the repository and its (optional) content; no I/O.
"""

from typing import Optional

from ..schemas import Confidence, RepoContent, Repository, Web3Detection


# =============================================================================
# CONFIGURATION
# =============================================================================

WEB3_TOPICS = frozenset({
    "web3", "blockchain", "solidity", "ethereum", "evm",
    "smart-contract", "smart-contracts", "defi", "nft", "nfts",
    "wagmi", "viem", "hardhat", "foundry", "truffle",
    "thegraph", "subgraph", "solana", "anchor", "near",
    "cosmos", "substrate", "polkadot", "web3js", "ethers",
    "dapp", "dapps", "dao",
})

# Ordered: the first three matches are quoted as evidence
README_KEYWORDS = (
    "ethereum",
    "smart contract",
    "blockchain",
    "web3",
    "defi",
    "nft",
    "token",
    "solidity",
    "hardhat",
    "foundry",
    "metamask",
    "wallet",
    "onchain",
    "on-chain",
)

# A single incidental mention is not evidence
MIN_README_KEYWORDS = 3
README_EVIDENCE_KEYWORDS = 3

SOLIDITY = "Solidity"


# =============================================================================
# DETECTOR
# =============================================================================

class Web3Detector:
    """Accumulates evidence strings and stack tokens for one repository."""

    def detect(self, repo: Repository, content: Optional[RepoContent]) -> Web3Detection:
        evidence: list[str] = []
        stacks: list[str] = []

        self._check_topics(repo, evidence, stacks)
        if content is not None:
            self._check_content(repo, content, evidence, stacks)
            self._check_readme(content, evidence)
        self._check_language(repo, evidence, stacks)

        return Web3Detection(
            is_web3=bool(evidence),
            detected_stacks=list(dict.fromkeys(stacks)),
            confidence=self._confidence(len(evidence)),
            evidence=evidence,
        )

    def _check_topics(self, repo: Repository, evidence: list[str], stacks: list[str]) -> None:
        matched = [topic for topic in repo.topics if topic.lower() in WEB3_TOPICS]
        if matched:
            evidence.append(f"Topics: {', '.join(matched)}")
            stacks.extend(matched)

    def _check_content(
        self,
        repo: Repository,
        content: RepoContent,
        evidence: list[str],
        stacks: list[str],
    ) -> None:
        if content.web3_frameworks:
            evidence.append(f"Frameworks: {', '.join(content.web3_frameworks)}")
            stacks.extend(content.web3_frameworks)

        if content.has_solidity_contracts and repo.language == SOLIDITY:
            evidence.append("Solidity contracts detected")
            stacks.append("solidity")

    def _check_readme(self, content: RepoContent, evidence: list[str]) -> None:
        if not content.readme:
            return
        readme = content.readme.lower()
        matched = [keyword for keyword in README_KEYWORDS if keyword in readme]
        if len(matched) >= MIN_README_KEYWORDS:
            evidence.append(f"README contains: {', '.join(matched[:README_EVIDENCE_KEYWORDS])}")

    def _check_language(self, repo: Repository, evidence: list[str], stacks: list[str]) -> None:
        if repo.language == SOLIDITY:
            evidence.append("Primary language: Solidity")
            stacks.append("solidity")

    @staticmethod
    def _confidence(evidence_count: int) -> Confidence:
        if evidence_count >= 3:
            return Confidence.HIGH
        if evidence_count == 2:
            return Confidence.MEDIUM
        return Confidence.LOW


_detector = Web3Detector()


def detect_web3(repo: Repository, content: Optional[RepoContent] = None) -> Web3Detection:
    """Convenience function mirroring Web3Detector().detect()."""
    return _detector.detect(repo, content)
