"""FastAPI application wiring for the pulse endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Body, FastAPI, Header, HTTPException
from fastapi.responses import ORJSONResponse

from .config import PulseConfig
from .service import PulseService
from .store import FallbackPulseStore, JsonlPulseStore, PulseStore

ROLE_HEADER = "X-Pilot-Role"


def create_app(
    store: Optional[PulseStore] = None,
    config: Optional[PulseConfig] = None,
) -> FastAPI:
    app = FastAPI(default_response_class=ORJSONResponse)
    config = config or PulseConfig()
    if store is None:
        store = FallbackPulseStore(JsonlPulseStore(config.store_path))

    service = PulseService(store)
    submit_roles = set(config.submit_roles)
    view_roles = set(config.view_roles)

    app.state.config = config
    app.state.service = service

    def _require_role(role: Optional[str], allowed: set) -> str:
        if not role:
            raise HTTPException(status_code=401, detail=f"Missing {ROLE_HEADER} header")
        if role not in allowed:
            raise HTTPException(status_code=403, detail=f"Role {role} may not access this resource")
        return role

    @app.post("/api/pilot/pulse", status_code=201)
    async def submit_pulse(
        body: Any = Body(default=None),
        x_pilot_role: Optional[str] = Header(default=None),
    ):
        role = _require_role(x_pilot_role, submit_roles)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")
        result = service.submit_pulse(body, role)
        if not result.success:
            return ORJSONResponse(
                status_code=400,
                content={"error": "Validation failed", "fields": result.errors},
            )
        return {"success": True, "role": result.role}

    @app.get("/api/pilot/pulse/trends")
    async def get_trends(x_pilot_role: Optional[str] = Header(default=None)):
        _require_role(x_pilot_role, view_roles)
        return {"data": service.get_trends().as_payload()}

    @app.api_route("/api/pilot/pulse/{response_id}", methods=["PUT", "PATCH", "DELETE"])
    async def immutable_response(response_id: str):
        return ORJSONResponse(status_code=405, content={"error": "Method Not Allowed"})

    return app


__all__ = ["create_app", "ROLE_HEADER"]
