from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from seczetta_risk.client.schemas import Profile, ProfileSearchResponse, RiskScore, RiskScoresResponse

log = logging.getLogger("seczetta_risk.client")

SEARCH_LABEL = "All Contractors"


class SecZettaError(Exception):
    """An outbound SecZetta call failed (transport, HTTP status or payload shape)."""

    def __init__(self, operation: str, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


def build_headers(api_key: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Token token={api_key}",
        "Accept": "application/json",
    }


def build_advanced_search(profile_type_id: Optional[str], attribute_id: Optional[str], value: Optional[str]) -> Dict[str, Any]:
    """
    Search body matching profiles of one type whose attribute equals value.
    """
    return {
        "advanced_search": {
            "label": SEARCH_LABEL,
            "condition_rules_attributes": [
                {
                    "type": "ProfileTypeRule",
                    "comparison_operator": "==",
                    "value": profile_type_id,
                },
                {
                    "type": "ProfileAttributeRule",
                    "condition_object_id": attribute_id,
                    "object_type": "NeAttribute",
                    "comparison_operator": "==",
                    "value": value,
                },
            ],
        }
    }


class SecZettaClient:
    """
    Thin SecZetta API client. One attempt per call, no retries.

    Every failure surfaces as SecZettaError so callers handle a single type.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        kwargs: Dict[str, Any] = {"headers": build_headers(api_key)}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._http = httpx.Client(**kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SecZettaClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, operation: str, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self._http.request(method, url, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SecZettaError(operation, f"{operation} returned HTTP {e.response.status_code}", status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            raise SecZettaError(operation, f"{operation} request failed: {e}") from e

        try:
            return r.json()
        except ValueError as e:
            raise SecZettaError(operation, f"{operation} returned a non-JSON body", status_code=r.status_code) from e

    def search_profiles(self, profile_type_id: Optional[str], attribute_id: Optional[str], value: Optional[str]) -> List[Profile]:
        body = build_advanced_search(profile_type_id, attribute_id, value)
        data = self._request("profile search", "POST", "/advanced_search/run", json=body)
        try:
            return ProfileSearchResponse.model_validate(data).profiles
        except ValidationError as e:
            raise SecZettaError("profile search", f"profile search returned an unexpected payload: {e.error_count()} error(s)") from e

    def risk_scores(self, object_id: str) -> List[RiskScore]:
        data = self._request("risk score", "GET", "/risk_scores", params={"object_id": object_id})
        try:
            return RiskScoresResponse.model_validate(data).risk_scores
        except ValidationError as e:
            raise SecZettaError("risk score", f"risk score returned an unexpected payload: {e.error_count()} error(s)") from e
