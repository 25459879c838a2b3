"""Certification lifecycle endpoints.

- POST /v1/certifications: issue (admin or verifier)
- GET  /v1/certifications/{id}: public record lookup
- POST /v1/certifications/{id}/renew: renew an expired record
- POST /v1/certifications/{id}/revoke: revoke (admin only)
- POST /v1/certifications/{id}/expire: manual active → expired
- GET  /v1/certifications/{id}/verify: public validity check
- GET  /v1/certifications/{id}/revocation: public revocation log entry

Verification of an existing-but-invalid credential answers 409 with
error "InvalidStatus" rather than 200 with valid=false, so a consumer
that only checks the status code can never mistake it for a pass.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from certissuer.api.dependencies import CallerDep, ServiceDep
from certissuer.models.certification import CertificationRecord, RevocationLogEntry

router = APIRouter(prefix="/v1/certifications", tags=["certifications"])


class IssueIn(BaseModel):
    subject: str
    certification_type: str
    evidence: list[str] = []
    metadata: str = ""


class IssueOut(BaseModel):
    id: str


class RenewIn(BaseModel):
    evidence: list[str] = []


class RevokeIn(BaseModel):
    reason: str


class CertificationOut(BaseModel):
    id: str
    subject: str
    certification_type: str
    issue_date: int
    expiration_date: int
    status: str
    evidence: list[str]
    metadata: str
    renewal_count: int

    @staticmethod
    def from_record(record: CertificationRecord) -> CertificationOut:
        return CertificationOut(
            id=record.id,
            subject=record.subject,
            certification_type=record.certification_type,
            issue_date=record.issue_date,
            expiration_date=record.expiration_date,
            status=record.status.value,
            evidence=list(record.evidence),
            metadata=record.metadata,
            renewal_count=record.renewal_count,
        )


class VerifyOut(BaseModel):
    id: str
    valid: bool
    status: str
    expiration_date: int


class RevocationOut(BaseModel):
    certification_id: str
    reason: str
    timestamp: int

    @staticmethod
    def from_entry(entry: RevocationLogEntry) -> RevocationOut:
        return RevocationOut(
            certification_id=entry.certification_id,
            reason=entry.reason,
            timestamp=entry.timestamp,
        )


class CertificationIdOut(BaseModel):
    id: str
    subject: str
    certification_type: str


@router.get("/id", response_model=CertificationIdOut)
def derive_id(
    service: ServiceDep,
    subject: str = Query(),
    certification_type: str = Query(),
) -> CertificationIdOut:
    """Derive the deterministic id for a (subject, type) pair."""
    return CertificationIdOut(
        id=service.certification_id(subject, certification_type),
        subject=subject,
        certification_type=certification_type,
    )


@router.post("", response_model=IssueOut, status_code=status.HTTP_201_CREATED)
def issue_certification(
    body: IssueIn, principal: CallerDep, service: ServiceDep
) -> IssueOut:
    certification_id = service.issue(
        principal.caller_id,
        body.subject,
        body.certification_type,
        body.evidence,
        body.metadata,
    )
    return IssueOut(id=certification_id)


@router.get("/{certification_id}", response_model=CertificationOut)
def get_certification(certification_id: str, service: ServiceDep) -> CertificationOut:
    return CertificationOut.from_record(service.get_certification(certification_id))


@router.post("/{certification_id}/renew", response_model=CertificationOut)
def renew_certification(
    certification_id: str,
    body: RenewIn,
    principal: CallerDep,
    service: ServiceDep,
) -> CertificationOut:
    record = service.renew(principal.caller_id, certification_id, body.evidence)
    return CertificationOut.from_record(record)


@router.post("/{certification_id}/revoke", response_model=RevocationOut)
def revoke_certification(
    certification_id: str,
    body: RevokeIn,
    principal: CallerDep,
    service: ServiceDep,
) -> RevocationOut:
    entry = service.revoke(principal.caller_id, certification_id, body.reason)
    return RevocationOut.from_entry(entry)


@router.post("/{certification_id}/expire", response_model=CertificationOut)
def expire_certification(
    certification_id: str, principal: CallerDep, service: ServiceDep
) -> CertificationOut:
    return CertificationOut.from_record(
        service.expire(principal.caller_id, certification_id)
    )


@router.get("/{certification_id}/verify", response_model=VerifyOut)
def verify_certification(certification_id: str, service: ServiceDep) -> VerifyOut:
    record = service.verify(certification_id)
    return VerifyOut(
        id=record.id,
        valid=True,
        status=record.status.value,
        expiration_date=record.expiration_date,
    )


@router.get("/{certification_id}/revocation", response_model=RevocationOut)
def get_revocation_log(certification_id: str, service: ServiceDep) -> RevocationOut:
    return RevocationOut.from_entry(service.get_revocation_log(certification_id))
