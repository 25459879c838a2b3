"""Admin and verifier membership endpoints.

Mutations require the caller to already be an admin; membership reads
are public.  PUT/DELETE are idempotent.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel

from certissuer.api.dependencies import CallerDep, ServiceDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/roles", tags=["roles"])


class MembershipOut(BaseModel):
    member_id: str
    role: str
    member: bool


class MembersOut(BaseModel):
    role: str
    members: list[str]


@router.get("/admins", response_model=MembersOut)
def list_admins(service: ServiceDep) -> MembersOut:
    return MembersOut(role="admin", members=service.list_admins())


@router.get("/verifiers", response_model=MembersOut)
def list_verifiers(service: ServiceDep) -> MembersOut:
    return MembersOut(role="verifier", members=service.list_verifiers())


@router.get("/admins/{member_id}", response_model=MembershipOut)
def is_admin(member_id: str, service: ServiceDep) -> MembershipOut:
    return MembershipOut(
        member_id=member_id, role="admin", member=service.is_admin(member_id)
    )


@router.get("/verifiers/{member_id}", response_model=MembershipOut)
def is_verifier(member_id: str, service: ServiceDep) -> MembershipOut:
    return MembershipOut(
        member_id=member_id, role="verifier", member=service.is_verifier(member_id)
    )


@router.put("/admins/{member_id}", response_model=MembershipOut)
def add_admin(
    member_id: str, principal: CallerDep, service: ServiceDep
) -> MembershipOut:
    service.add_admin(principal.caller_id, member_id)
    return MembershipOut(member_id=member_id, role="admin", member=True)


@router.delete("/admins/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_admin(member_id: str, principal: CallerDep, service: ServiceDep) -> None:
    service.remove_admin(principal.caller_id, member_id)


@router.put("/verifiers/{member_id}", response_model=MembershipOut)
def add_verifier(
    member_id: str, principal: CallerDep, service: ServiceDep
) -> MembershipOut:
    service.add_verifier(principal.caller_id, member_id)
    return MembershipOut(member_id=member_id, role="verifier", member=True)


@router.delete("/verifiers/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_verifier(
    member_id: str, principal: CallerDep, service: ServiceDep
) -> None:
    service.remove_verifier(principal.caller_id, member_id)
