from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from seczetta_risk.api.schemas import ErrorResponse, RuleRequest, RuleResponse
from seczetta_risk.config.settings import RuleConfig
from seczetta_risk.rule.context import AuthContext, User
from seczetta_risk.rule.hook import grab_risk_score

log = logging.getLogger("seczetta_risk.api")
if not log.handlers:
    logging.basicConfig(level=logging.INFO)


def _request_id() -> str:
    return uuid.uuid4().hex


def _error(request_id: str, status: int, code: str, message: str, *, details: Dict[str, Any] | None = None, hint: str | None = None):
    payload = ErrorResponse(
        request_id=request_id,
        error={
            "code": code,
            "message": message,
            "details": details or {},
        },
        hint=hint,
    ).model_dump()
    return JSONResponse(payload, status_code=status)


def create_app(config: Optional[RuleConfig] = None, **rule_kwargs: Any) -> FastAPI:
    """
    Build the hook app. Without an explicit config, settings are read from
    the environment on every request.
    """
    app = FastAPI(
        title="SecZetta Risk Rule",
        version="0.1.0",
        description="Authentication hook that gates logins on the SecZetta risk score.",
    )
    app.state.config = config
    app.state.rule_kwargs = rule_kwargs

    # -----------------------------
    # Middleware: request_id
    # -----------------------------
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id") or _request_id()
        request.state.request_id = rid
        resp = await call_next(request)
        resp.headers["x-request-id"] = rid
        return resp

    # -----------------------------
    # Exception handlers (structured errors)
    # -----------------------------
    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", _request_id())
        log.exception("Unhandled error rid=%s path=%s", rid, request.url.path)
        resp = _error(
            rid,
            500,
            "INTERNAL_ERROR",
            "Unexpected server error.",
            details={"type": exc.__class__.__name__},
            hint="Check server logs using the request_id header.",
        )
        resp.headers["x-request-id"] = rid
        return resp

    # -----------------------------
    # Routes
    # -----------------------------
    @app.get("/healthz", response_model=dict)
    def healthz(request: Request):
        return {"ok": True, "request_id": getattr(request.state, "request_id", "")}

    @app.post(
        "/v1/rules/seczetta-risk",
        response_model=RuleResponse,
        responses={
            403: {
                "model": ErrorResponse,
                "content": {
                    "application/json": {
                        "example": {
                            "ok": False,
                            "request_id": "abc123",
                            "error": {
                                "code": "UNAUTHORIZED",
                                "message": "A 150 Risk score is too high. Maximum acceptable risk is 100",
                                "details": {"outcome": "block", "risk_score": 150.0},
                            },
                        }
                    }
                },
            },
            500: {"model": ErrorResponse},
        },
    )
    def seczetta_risk(req: RuleRequest, request: Request):
        rid = getattr(request.state, "request_id", _request_id())
        cfg = request.app.state.config or RuleConfig.from_env()

        result = grab_risk_score(
            User.from_dict(req.user),
            AuthContext.from_dict(req.context),
            cfg,
            **request.app.state.rule_kwargs,
        )

        if not result.ok:
            log.info("Denied rid=%s outcome=%s", rid, result.outcome)
            details = {"outcome": result.outcome}
            if result.risk_score is not None:
                details["risk_score"] = result.risk_score
            return _error(rid, 403, "UNAUTHORIZED", str(result.error), details=details)

        resp = RuleResponse(
            request_id=rid,
            decision=result.outcome,
            risk_score=result.risk_score,
            user=result.user.to_dict(),
            context=result.context.to_dict(),
        )
        return JSONResponse(resp.model_dump(), status_code=200)

    return app


app = create_app()
