from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """SecZetta profile as returned by the advanced search endpoint."""

    model_config = ConfigDict(extra="allow")

    id: str
    uid: Optional[str] = None
    name: Optional[str] = None
    profile_type_id: Optional[str] = None
    status: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ProfileSearchResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    profiles: List[Profile]


class RiskScore(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    uid: Optional[str] = None
    object_id: Optional[str] = None
    object_type: Optional[str] = None
    overall_score: float
    impact_score: Optional[float] = None
    probability_score: Optional[float] = None


class RiskScoresResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    risk_scores: List[RiskScore]
