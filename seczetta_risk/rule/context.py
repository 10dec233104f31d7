from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

# Host-side key names for the fields the rule touches
MULTIFACTOR = "multifactor"
ID_TOKEN = "idToken"
ACCESS_TOKEN = "accessToken"


@dataclass(frozen=True)
class User:
    user_name: Optional[str] = None
    email: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def lookup_value(self) -> Optional[str]:
        return self.user_name or self.email

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "User":
        return cls(
            user_name=d.get("user_name") or d.get("username"),
            email=d.get("email"),
            raw=dict(d),
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.raw:
            return dict(self.raw)
        return {"user_name": self.user_name, "email": self.email}


@dataclass
class AuthContext:
    """
    Mutable per-login transaction state.

    The rule only writes multifactor and one claim in each token mapping;
    everything else in extra belongs to the host and is passed through.
    """
    multifactor: Optional[Dict[str, Any]] = None
    id_token: Dict[str, Any] = field(default_factory=dict)
    access_token: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def require_mfa(self) -> None:
        self.multifactor = {"provider": "any", "allowRememberBrowser": False}

    def set_claim(self, name: str, value: Any) -> None:
        self.id_token[name] = value
        self.access_token[name] = value

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AuthContext":
        extra = {k: v for k, v in d.items() if k not in (MULTIFACTOR, ID_TOKEN, ACCESS_TOKEN)}
        mfa = d.get(MULTIFACTOR)
        return cls(
            multifactor=dict(mfa) if isinstance(mfa, Mapping) else None,
            id_token=dict(d.get(ID_TOKEN) or {}),
            access_token=dict(d.get(ACCESS_TOKEN) or {}),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.extra)
        if self.multifactor is not None:
            out[MULTIFACTOR] = dict(self.multifactor)
        out[ID_TOKEN] = dict(self.id_token)
        out[ACCESS_TOKEN] = dict(self.access_token)
        return out
