from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from certissuer.api.dependencies import CallerDep, ServiceDep
from certissuer.models.requirement import RequirementRecord

router = APIRouter(prefix="/v1/requirements", tags=["requirements"])


class RequirementIn(BaseModel):
    required_hours: int = Field(ge=0)
    required_activities: list[str] = []
    validity_days: int


class RequirementOut(BaseModel):
    certification_type: str
    required_hours: int
    required_activities: list[str]
    validity_days: int

    @staticmethod
    def from_record(record: RequirementRecord) -> RequirementOut:
        return RequirementOut(
            certification_type=record.certification_type,
            required_hours=record.required_hours,
            required_activities=list(record.required_activities),
            validity_days=record.validity_days,
        )


@router.get("", response_model=list[RequirementOut])
def list_requirements(service: ServiceDep) -> list[RequirementOut]:
    return [RequirementOut.from_record(r) for r in service.list_requirements()]


@router.get("/{certification_type}", response_model=RequirementOut)
def get_requirements(certification_type: str, service: ServiceDep) -> RequirementOut:
    return RequirementOut.from_record(service.get_requirements(certification_type))


@router.put("/{certification_type}", response_model=RequirementOut)
def set_requirements(
    certification_type: str,
    body: RequirementIn,
    principal: CallerDep,
    service: ServiceDep,
) -> RequirementOut:
    record = service.set_requirements(
        principal.caller_id,
        certification_type,
        body.required_hours,
        body.required_activities,
        body.validity_days,
    )
    return RequirementOut.from_record(record)
