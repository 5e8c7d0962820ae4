"""
Talent Analyzer heuristics

Pure functions over fetched GitHub data:
- Web3 Detector: flags Web3 repositories with cited evidence
- Payload Builder: aggregates repos into the report model's input
"""

from .aggregator import build_analysis_payload
from .web3 import Web3Detector, detect_web3

__all__ = [
    "build_analysis_payload",
    "detect_web3",
    "Web3Detector",
]
