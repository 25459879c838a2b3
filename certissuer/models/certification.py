from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from enum import StrEnum

MAX_TYPE_LEN = 50
MAX_METADATA_LEN = 500
MAX_EVIDENCE = 20
MAX_REASON_LEN = 200

CERTIFICATION_ID_PREFIX = "cert_"


class CertificationStatus(StrEnum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass(frozen=True, slots=True)
class CertificationKey:
    """Composite identity of a record: one record per (subject, type).

    The id is a SHA-256 over a JSON array of both parts, so a subject
    containing a separator character can never collide with another
    subject/type pair.
    """

    subject: str
    certification_type: str

    @property
    def id(self) -> str:
        encoded = json.dumps(
            [self.subject, self.certification_type],
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")
        return CERTIFICATION_ID_PREFIX + hashlib.sha256(encoded).hexdigest()


def derive_certification_id(subject: str, certification_type: str) -> str:
    return CertificationKey(subject, certification_type).id


@dataclass(frozen=True, slots=True)
class CertificationRecord:
    """One subject's standing in one certification type."""

    id: str
    subject: str
    certification_type: str
    issue_date: int
    expiration_date: int
    status: CertificationStatus = CertificationStatus.ACTIVE
    evidence: tuple[str, ...] = ()
    metadata: str = ""
    renewal_count: int = 0

    @staticmethod
    def new(
        *,
        subject: str,
        certification_type: str,
        issue_date: int,
        expiration_date: int,
        evidence: tuple[str, ...] = (),
        metadata: str = "",
    ) -> CertificationRecord:
        return CertificationRecord(
            id=derive_certification_id(subject, certification_type),
            subject=subject,
            certification_type=certification_type,
            issue_date=issue_date,
            expiration_date=expiration_date,
            evidence=evidence,
            metadata=metadata,
        )

    def is_valid_at(self, now: int) -> bool:
        return self.status is CertificationStatus.ACTIVE and self.expiration_date > now


@dataclass(frozen=True, slots=True)
class RevocationLogEntry:
    """Audit entry written as a side effect of revocation."""

    certification_id: str
    reason: str
    timestamp: int
