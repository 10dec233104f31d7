from __future__ import annotations

from typing import Optional

RISK_RETRIEVAL_FAILED = "Error retrieving Risk Score."


class UnauthorizedError(Exception):
    """Denial signal handed back to the identity pipeline."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RiskUnavailable(Exception):
    """No usable risk score could be obtained for the user."""


def format_score(score: float) -> str:
    """Full-precision score text; whole numbers print without a trailing .0"""
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return repr(score)


def risk_too_high(score: float, maximum: Optional[int]) -> UnauthorizedError:
    return UnauthorizedError(f"A {format_score(score)} Risk score is too high. Maximum acceptable risk is {maximum}")
