from __future__ import annotations

from typing import Protocol

ALLOW = "allow"
MFA = "mfa"
BLOCK = "block"


class DecisionPolicy(Protocol):
    """
    Maps an overall risk score to an authentication outcome.
    """

    def decide(self, risk_score: float) -> str:
        """
        Return one of: "allow", "mfa", "block"
        """
        ...
