from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, MutableMapping, Optional

from seczetta_risk.client.seczetta import SecZettaClient, SecZettaError
from seczetta_risk.config.settings import RuleConfig
from seczetta_risk.decision.base import BLOCK, MFA, DecisionPolicy
from seczetta_risk.decision.threshold import RiskThresholdPolicy
from seczetta_risk.rule.context import ACCESS_TOKEN, ID_TOKEN, MULTIFACTOR, AuthContext, User
from seczetta_risk.rule.errors import RISK_RETRIEVAL_FAILED, RiskUnavailable, UnauthorizedError, risk_too_high

log = logging.getLogger("seczetta_risk.rule")

SKIPPED = "skipped"
ERROR_CONTINUE = "error_continue"
ERROR_DENY = "error_deny"


@dataclass
class RuleResult:
    """
    Outcome of one rule invocation.

    outcome is one of: skipped, allow, mfa, block, error_continue, error_deny.
    error is set exactly when the transaction must be denied.
    """
    outcome: str
    user: User
    context: AuthContext
    risk_score: Optional[float] = None
    error: Optional[UnauthorizedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "outcome": self.outcome,
            "risk_score": self.risk_score,
            "error": str(self.error) if self.error else None,
            "user": self.user.to_dict(),
            "context": self.context.to_dict(),
        }


def _fetch_overall_score(client: SecZettaClient, user: User, config: RuleConfig) -> float:
    """
    Profile search, then risk score lookup. First match wins on both collections.
    """
    value = user.lookup_value
    if not value:
        raise RiskUnavailable("User has no user_name or email to search on.")

    try:
        profiles = client.search_profiles(config.profile_type_id, config.attribute_id, value)
    except SecZettaError as e:
        raise RiskUnavailable(f"Error while calling Profile API: {e}") from e

    if not profiles:
        raise RiskUnavailable("Profile not found. Empty Array sent back!")

    object_id = profiles[0].id
    log.info("Resolved SecZetta profile %s", object_id)

    try:
        scores = client.risk_scores(object_id)
    except SecZettaError as e:
        raise RiskUnavailable(f"Error while calling Risk Score API: {e}") from e

    if not scores:
        raise RiskUnavailable(f"No risk score returned for profile {object_id}.")

    return scores[0].overall_score


def _on_error(user: User, context: AuthContext, config: RuleConfig) -> RuleResult:
    if config.authenticate_on_error:
        return RuleResult(ERROR_CONTINUE, user, context)
    return RuleResult(ERROR_DENY, user, context, error=UnauthorizedError(RISK_RETRIEVAL_FAILED))


def grab_risk_score(
    user: User,
    context: AuthContext,
    config: RuleConfig,
    *,
    client: Optional[SecZettaClient] = None,
    policy: Optional[DecisionPolicy] = None,
) -> RuleResult:
    """
    Fetch the user's SecZetta risk score and apply the threshold policy.

    context is mutated in place on the allow and mfa paths. A client passed in
    is left open; one created here is closed before returning.
    """
    if not config.is_complete:
        log.info("Missing required configuration. Skipping.")
        return RuleResult(SKIPPED, user, context)

    owns_client = client is None
    if client is None:
        client = SecZettaClient(config.base_url, config.api_key, timeout=config.timeout)

    try:
        score = _fetch_overall_score(client, user, config)
    except RiskUnavailable as e:
        log.warning("%s", e)
        return _on_error(user, context, config)
    finally:
        if owns_client:
            client.close()

    if policy is None:
        policy = RiskThresholdPolicy.from_config(config)
    outcome = policy.decide(score)

    if outcome == BLOCK:
        maximum = getattr(policy, "maximum_allowed_risk", config.maximum_allowed_risk)
        log.warning("Risk score %s is greater than maximum of %s", score, maximum)
        return RuleResult(BLOCK, user, context, risk_score=score, error=risk_too_high(score, maximum))

    if outcome == MFA:
        allowable = getattr(policy, "allowable_risk", config.allowable_risk)
        log.info("Risk score %s is greater than allowable risk of %s. Prompting for MFA", score, allowable)
        context.require_mfa()
    else:
        log.info("Risk score %s is within allowable risk", score)

    if config.risk_key:
        context.set_claim(config.risk_key, score)

    return RuleResult(outcome, user, context, risk_score=score)


def run_rule(
    user: MutableMapping[str, Any],
    context: MutableMapping[str, Any],
    callback: Callable[..., Any],
    config: Optional[RuleConfig] = None,
    **kwargs: Any,
) -> Any:
    """
    Continuation-style entry point for hosts that pass plain dicts.

    Calls callback(None, user, context) to proceed or callback(error) to deny,
    exactly once. Rule writes are merged back into the caller's context dict.
    """
    if config is None:
        config = RuleConfig.from_env()

    result = grab_risk_score(User.from_dict(user), AuthContext.from_dict(context), config, **kwargs)
    if not result.ok:
        return callback(result.error)

    ctx = result.context
    if ctx.multifactor is not None:
        context[MULTIFACTOR] = ctx.multifactor
    if ctx.id_token:
        context[ID_TOKEN] = ctx.id_token
    if ctx.access_token:
        context[ACCESS_TOKEN] = ctx.access_token
    return callback(None, user, context)
