import httpx
import pytest

from seczetta_risk.client.seczetta import SecZettaClient
from seczetta_risk.config.settings import RuleConfig

BASE_URL = "https://tenant.mynonemployee.com/api"
API_KEY = "sz-test-key-0123456789"
PROFILE_ID = "633b5e71-090c-4a47-a1a3-d0b8338df872"


def make_profile(pid=PROFILE_ID, name="testuser01@seczetta.com"):
    return {
        "id": pid,
        "uid": "eedb47e4c2e147778a9e3be61c255a38",
        "name": name,
        "profile_type_id": "5666f53e-cdd8-4420-8431-ca6e62e81451",
        "status": "Active",
        "attributes": {"personal_email": name},
    }


def make_score(overall, object_id=PROFILE_ID):
    return {
        "id": "14118693-983e-462f-a330-f3b34d29f281",
        "uid": "036e7e2a3d0c41938609cdc6029d5b11",
        "object_id": object_id,
        "object_type": "Profile",
        "overall_score": overall,
        "impact_score": 7.0,
        "probability_score": 0.0,
    }


class FakeSecZetta:
    """In-process stand-in for the SecZetta API, served over httpx.MockTransport."""

    def __init__(self, profiles=None, scores=None):
        self.profiles = [make_profile()] if profiles is None else profiles
        self.scores = [make_score(3.5)] if scores is None else scores
        self.profile_status = 200
        self.risk_status = 200
        self.profile_down = False
        self.risk_down = False
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/advanced_search/run"):
            if self.profile_down:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(self.profile_status, json={"profiles": self.profiles})
        if path.endswith("/risk_scores"):
            if self.risk_down:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(self.risk_status, json={"risk_scores": self.scores})
        return httpx.Response(404, json={"error": "not found"})

    def client(self):
        return SecZettaClient(BASE_URL, API_KEY, transport=httpx.MockTransport(self.handler))

    def paths(self):
        return [r.url.path for r in self.requests]


@pytest.fixture
def seczetta():
    return FakeSecZetta()


def make_config(**overrides):
    settings = {
        "SECZETTA_API_KEY": API_KEY,
        "SECZETTA_BASE_URL": BASE_URL,
        "SECZETTA_ATTRIBUTE_ID": "personal_email",
        "SECZETTA_PROFILE_TYPE_ID": "5666f53e-cdd8-4420-8431-ca6e62e81451",
    }
    for k, v in overrides.items():
        key = "SECZETTA_" + k.upper()
        if v is None:
            settings.pop(key, None)
        else:
            settings[key] = v
    return RuleConfig.from_mapping(settings)
