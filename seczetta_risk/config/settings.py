from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

log = logging.getLogger("seczetta_risk.config")

ENV_PREFIX = "SECZETTA_"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_threshold(name: str, raw: Any) -> Optional[int]:
    """
    Leading-integer parse: "30" -> 30, "30.9" -> 30, "abc" -> None.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        log.warning("Ignoring non-numeric %s=%r", name, raw)
        return None
    if isinstance(raw, (int, float)):
        try:
            return int(raw)
        except (ValueError, OverflowError):
            log.warning("Ignoring non-finite %s=%r", name, raw)
            return None

    s = str(raw)
    if not s.strip():
        return None
    m = _LEADING_INT.match(s)
    if not m:
        log.warning("Ignoring non-numeric %s=%r", name, raw)
        return None
    return int(m.group(1))


def _parse_timeout(raw: Any) -> Optional[float]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        log.warning("Ignoring non-numeric %sTIMEOUT=%r", ENV_PREFIX, raw)
        return None


def _opt_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    s = str(raw)
    return s if s else None


@dataclass(frozen=True)
class RuleConfig:
    """
    Settings for one SecZetta risk rule.

    api_key and base_url gate the whole rule; the rest is used as given.
    """
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    attribute_id: Optional[str] = None
    profile_type_id: Optional[str] = None

    authenticate_on_error: bool = False
    risk_key: Optional[str] = None
    allowable_risk: Optional[int] = None
    maximum_allowed_risk: Optional[int] = None
    timeout: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key) and bool(self.base_url)

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "RuleConfig":
        def get(key: str) -> Any:
            return settings.get(ENV_PREFIX + key)

        base_url = _opt_str(get("BASE_URL"))
        if base_url:
            base_url = base_url.rstrip("/")

        cfg = cls(
            api_key=_opt_str(get("API_KEY")),
            base_url=base_url,
            attribute_id=_opt_str(get("ATTRIBUTE_ID")),
            profile_type_id=_opt_str(get("PROFILE_TYPE_ID")),
            # only the exact string "true" opts into fail-open
            authenticate_on_error=get("AUTHENTICATE_ON_ERROR") == "true",
            risk_key=_opt_str(get("RISK_KEY")),
            allowable_risk=_parse_threshold(ENV_PREFIX + "ALLOWABLE_RISK", get("ALLOWABLE_RISK")),
            maximum_allowed_risk=_parse_threshold(ENV_PREFIX + "MAXIMUM_ALLOWED_RISK", get("MAXIMUM_ALLOWED_RISK")),
            timeout=_parse_timeout(get("TIMEOUT")),
        )

        if cfg.is_complete:
            missing = [k for k, v in (("ATTRIBUTE_ID", cfg.attribute_id), ("PROFILE_TYPE_ID", cfg.profile_type_id)) if not v]
            if missing:
                log.warning("Missing %s; profile search will run without them", ", ".join(ENV_PREFIX + k for k in missing))

        return cfg

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RuleConfig":
        return cls.from_mapping(os.environ if environ is None else environ)

    def redacted(self) -> Dict[str, Any]:
        key = self.api_key
        masked = None
        if key:
            masked = key[:4] + "..." if len(key) > 8 else "***"
        return {
            "api_key": masked,
            "base_url": self.base_url,
            "attribute_id": self.attribute_id,
            "profile_type_id": self.profile_type_id,
            "authenticate_on_error": self.authenticate_on_error,
            "risk_key": self.risk_key,
            "allowable_risk": self.allowable_risk,
            "maximum_allowed_risk": self.maximum_allowed_risk,
            "timeout": self.timeout,
        }
