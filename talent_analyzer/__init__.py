"""
Talent Analyzer

GitHub profile analysis service producing structured Web3 hiring reports.
"""

__version__ = "1.0.0"
