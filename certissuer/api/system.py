from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from certissuer.api.dependencies import CallerDep, ServiceDep

router = APIRouter(prefix="/v1/system", tags=["system"])


class PauseStateOut(BaseModel):
    paused: bool
    issued_total: int


@router.get("/pause", response_model=PauseStateOut)
def get_pause_state(service: ServiceDep) -> PauseStateOut:
    return PauseStateOut(
        paused=service.is_paused(), issued_total=service.issuance_count()
    )


@router.post("/pause", response_model=PauseStateOut)
def pause(principal: CallerDep, service: ServiceDep) -> PauseStateOut:
    service.pause(principal.caller_id)
    return get_pause_state(service)


@router.post("/unpause", response_model=PauseStateOut)
def unpause(principal: CallerDep, service: ServiceDep) -> PauseStateOut:
    service.unpause(principal.caller_id)
    return get_pause_state(service)
