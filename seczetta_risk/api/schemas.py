from __future__ import annotations

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


Outcome = Literal["skipped", "allow", "mfa", "error_continue"]


class RuleRequest(BaseModel):
    user: Dict[str, Any] = Field(..., description="Identity record (user_name and/or email)")
    context: Dict[str, Any] = Field(default_factory=dict, description="Authentication transaction context")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {"user_name": "testuser01@seczetta.com", "email": "testuser01@seczetta.com"},
                "context": {"idToken": {}, "accessToken": {}},
            }
        }
    )


class RuleResponse(BaseModel):
    ok: bool = True
    request_id: str
    decision: Outcome
    risk_score: Optional[float] = None
    user: Dict[str, Any]
    context: Dict[str, Any]


class ErrorResponse(BaseModel):
    ok: bool = False
    request_id: str
    error: Dict[str, Any]
    hint: Optional[str] = None
