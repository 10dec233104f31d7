from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from seczetta_risk.config.settings import RuleConfig
from seczetta_risk.decision.base import ALLOW, BLOCK, MFA


@dataclass(frozen=True)
class RiskThresholdPolicy:
    """
    Two-threshold policy over the SecZetta overall score.

    Decision order:
      1) allowable < score < maximum -> mfa (needs both thresholds)
      2) score > maximum             -> block
      3) otherwise                   -> allow

    Comparisons are strict: a score equal to a threshold does not cross it.
    """
    allowable_risk: Optional[int] = None
    maximum_allowed_risk: Optional[int] = None

    @classmethod
    def from_config(cls, config: RuleConfig) -> "RiskThresholdPolicy":
        return cls(allowable_risk=config.allowable_risk, maximum_allowed_risk=config.maximum_allowed_risk)

    def decide(self, risk_score: float) -> str:
        if (
            self.allowable_risk is not None
            and self.maximum_allowed_risk is not None
            and self.allowable_risk < risk_score < self.maximum_allowed_risk
        ):
            return MFA

        if self.maximum_allowed_risk is not None and risk_score > self.maximum_allowed_risk:
            return BLOCK

        return ALLOW
