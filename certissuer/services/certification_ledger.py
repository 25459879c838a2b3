"""Certification lifecycle: issue, renew, revoke, expire, verify.

Record state machine::

    (none) --issue--> active --expire--> expired --renew/issue--> active
                        |                   |
                        +------revoke-------+--> revoked --issue--> active

Stored status never changes on its own when time passes.  ``verify``
is the only place that compares expiration_date with the clock, and
with the "clock" renewal policy, ``renew``.

Every public method reads "now" once, checks in a fixed order (pause,
role, input bounds, lookups, validator) and writes only after all
checks pass, inside one store transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from certissuer.core.config import RenewalEligibility
from certissuer.models.certification import (
    MAX_EVIDENCE,
    MAX_METADATA_LEN,
    MAX_REASON_LEN,
    CertificationRecord,
    CertificationStatus,
    RevocationLogEntry,
    derive_certification_id,
)
from certissuer.models.requirement import RequirementRecord
from certissuer.repos.state_store import StateStore
from certissuer.services.clock import Clock
from certissuer.services.errors import (
    AlreadyCertified,
    EvidenceLimitExceeded,
    InvalidStatus,
    InvalidTeacher,
    MetadataTooLong,
    NotExpired,
    NotFound,
    ReasonTooLong,
    RequirementsNotMet,
)
from certissuer.services.prerequisite_validator import (
    IssuanceEvidenceValidator,
    PrerequisiteValidator,
    RenewalEvidenceValidator,
)
from certissuer.services.registry import AuthorizationRegistry, PauseSwitch
from certissuer.services.requirement_catalog import (
    RequirementCatalog,
    validate_certification_type,
)

logger = logging.getLogger(__name__)


class CertificationLedger:
    def __init__(
        self,
        store: StateStore,
        registry: AuthorizationRegistry,
        pause_switch: PauseSwitch,
        catalog: RequirementCatalog,
        clock: Clock,
        *,
        units_per_day: int = 86400,
        renewal_eligibility: RenewalEligibility = "stored-status",
        issuance_validator: PrerequisiteValidator | None = None,
        renewal_validator: PrerequisiteValidator | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._pause = pause_switch
        self._catalog = catalog
        self._clock = clock
        self._units_per_day = units_per_day
        self._renewal_eligibility = renewal_eligibility
        self._issuance_validator = issuance_validator or IssuanceEvidenceValidator()
        self._renewal_validator = renewal_validator or RenewalEvidenceValidator()

    def _expiration(self, now: int, requirement: RequirementRecord) -> int:
        return now + requirement.validity_days * self._units_per_day

    def _require_record(self, certification_id: str) -> CertificationRecord:
        record = self._store.get_certification(certification_id)
        if record is None:
            raise NotFound(f"certification {certification_id} not found")
        return record

    def _require_requirement(self, certification_type: str) -> RequirementRecord:
        requirement = self._catalog.find(certification_type)
        if requirement is None:
            raise NotFound(
                f"no requirements configured for type {certification_type!r}"
            )
        return requirement

    # ------------------------------------------------------------------
    # issue
    # ------------------------------------------------------------------

    def issue(
        self,
        caller: str,
        subject: str,
        certification_type: str,
        evidence: Sequence[str],
        metadata: str = "",
    ) -> str:
        """Issue a certification, or re-issue over an expired/revoked one.

        Returns the derived certification id.
        """
        evidence = tuple(evidence)
        with self._store.transaction():
            now = self._clock.now()
            self._pause.ensure_not_paused("issue")
            self._registry.require_issuer(caller, "issue")
            if not subject:
                raise InvalidTeacher("subject must be non-empty")
            validate_certification_type(certification_type)
            requirement = self._require_requirement(certification_type)

            certification_id = derive_certification_id(subject, certification_type)

            if len(metadata) > MAX_METADATA_LEN:
                raise MetadataTooLong(
                    f"metadata must be at most {MAX_METADATA_LEN} characters"
                )
            if len(evidence) > MAX_EVIDENCE:
                raise EvidenceLimitExceeded(
                    f"a certification holds at most {MAX_EVIDENCE} evidence references"
                )

            existing = self._store.get_certification(certification_id)
            if existing is not None and existing.status is CertificationStatus.ACTIVE:
                logger.warning(
                    "Rejected issue: subject=%s type=%s already holds an active certification",
                    subject,
                    certification_type,
                    extra={"operation": "issue", "certification_id": certification_id},
                )
                raise AlreadyCertified(
                    f"{subject} already holds an active {certification_type!r} certification"
                )

            if not self._issuance_validator.validate(evidence, requirement):
                logger.warning(
                    "Rejected issue: requirements not met subject=%s type=%s evidence=%d",
                    subject,
                    certification_type,
                    len(evidence),
                    extra={"operation": "issue", "certification_id": certification_id},
                )
                raise RequirementsNotMet(
                    f"evidence does not satisfy {certification_type!r} requirements"
                )

            if existing is None:
                record = CertificationRecord.new(
                    subject=subject,
                    certification_type=certification_type,
                    issue_date=now,
                    expiration_date=self._expiration(now, requirement),
                    evidence=evidence,
                    metadata=metadata,
                )
            else:
                combined = existing.evidence + evidence
                if len(combined) > MAX_EVIDENCE:
                    raise EvidenceLimitExceeded(
                        f"a certification holds at most {MAX_EVIDENCE} evidence references"
                    )
                record = replace(
                    existing,
                    issue_date=now,
                    expiration_date=self._expiration(now, requirement),
                    status=CertificationStatus.ACTIVE,
                    evidence=combined,
                    metadata=metadata,
                    renewal_count=existing.renewal_count + 1,
                )
            self._store.put_certification(record)
            self._store.increment_issuance_count()

        logger.info(
            "Issued certification id=%s subject=%s type=%s expires=%d renewals=%d",
            record.id,
            subject,
            certification_type,
            record.expiration_date,
            record.renewal_count,
            extra={"operation": "issue", "certification_id": record.id},
        )
        return record.id

    # ------------------------------------------------------------------
    # renew
    # ------------------------------------------------------------------

    def _renewable(self, record: CertificationRecord, now: int) -> bool:
        if record.status is CertificationStatus.EXPIRED:
            return True
        return (
            self._renewal_eligibility == "clock"
            and record.status is CertificationStatus.ACTIVE
            and record.expiration_date <= now
        )

    def renew(
        self,
        caller: str,
        certification_id: str,
        additional_evidence: Sequence[str],
    ) -> CertificationRecord:
        additional_evidence = tuple(additional_evidence)
        with self._store.transaction():
            now = self._clock.now()
            self._pause.ensure_not_paused("renew")
            self._registry.require_issuer(caller, "renew")
            record = self._require_record(certification_id)
            requirement = self._require_requirement(record.certification_type)

            if not self._renewable(record, now):
                logger.warning(
                    "Rejected renew: id=%s status=%s",
                    certification_id,
                    record.status,
                    extra={"operation": "renew", "certification_id": certification_id},
                )
                raise NotExpired(
                    f"certification {certification_id} is {record.status}, not expired"
                )

            if not self._renewal_validator.validate(additional_evidence, requirement):
                raise RequirementsNotMet(
                    f"renewal evidence does not satisfy {record.certification_type!r} requirements"
                )

            combined = record.evidence + additional_evidence
            if len(combined) > MAX_EVIDENCE:
                raise EvidenceLimitExceeded(
                    f"a certification holds at most {MAX_EVIDENCE} evidence references"
                )

            renewed = replace(
                record,
                issue_date=now,
                expiration_date=self._expiration(now, requirement),
                status=CertificationStatus.ACTIVE,
                evidence=combined,
                renewal_count=record.renewal_count + 1,
            )
            self._store.put_certification(renewed)

        logger.info(
            "Renewed certification id=%s renewals=%d expires=%d",
            certification_id,
            renewed.renewal_count,
            renewed.expiration_date,
            extra={"operation": "renew", "certification_id": certification_id},
        )
        return renewed

    # ------------------------------------------------------------------
    # revoke / expire
    # ------------------------------------------------------------------

    def revoke(self, caller: str, certification_id: str, reason: str) -> RevocationLogEntry:
        with self._store.transaction():
            now = self._clock.now()
            self._pause.ensure_not_paused("revoke")
            self._registry.require_admin(caller, "revoke")
            if len(reason) > MAX_REASON_LEN:
                raise ReasonTooLong(
                    f"revocation reason must be at most {MAX_REASON_LEN} characters"
                )
            record = self._require_record(certification_id)

            if record.status is CertificationStatus.REVOKED:
                logger.warning(
                    "Rejected revoke: id=%s is already revoked",
                    certification_id,
                    extra={"operation": "revoke", "certification_id": certification_id},
                )
                raise InvalidStatus(f"certification {certification_id} is already revoked")

            self._store.put_certification(
                replace(record, status=CertificationStatus.REVOKED)
            )
            entry = RevocationLogEntry(
                certification_id=certification_id, reason=reason, timestamp=now
            )
            self._store.put_revocation(entry)

        logger.info(
            "Revoked certification id=%s by caller=%s reason=%r",
            certification_id,
            caller,
            reason,
            extra={"operation": "revoke", "certification_id": certification_id},
        )
        return entry

    def expire(self, caller: str, certification_id: str) -> CertificationRecord:
        """Manually flip an active record to expired.  Dates are untouched."""
        with self._store.transaction():
            self._pause.ensure_not_paused("expire")
            self._registry.require_issuer(caller, "expire")
            record = self._require_record(certification_id)
            if record.status is not CertificationStatus.ACTIVE:
                raise InvalidStatus(
                    f"only active certifications can be expired (got {record.status})"
                )
            expired = replace(record, status=CertificationStatus.EXPIRED)
            self._store.put_certification(expired)

        logger.info(
            "Expired certification id=%s by caller=%s",
            certification_id,
            caller,
            extra={"operation": "expire", "certification_id": certification_id},
        )
        return expired

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def verify(self, certification_id: str) -> CertificationRecord:
        """Return the record if it is currently valid, else raise.

        Raises NotFound for an unknown id and InvalidStatus for a record
        that is not active or whose expiration height has passed.
        """
        now = self._clock.now()
        record = self._require_record(certification_id)
        if not record.is_valid_at(now):
            raise InvalidStatus(
                f"certification {certification_id} is not valid "
                f"(status={record.status}, expires={record.expiration_date}, now={now})"
            )
        return record

    def get_certification(self, certification_id: str) -> CertificationRecord:
        return self._require_record(certification_id)

    def get_revocation_log(self, certification_id: str) -> RevocationLogEntry:
        entry = self._store.get_revocation(certification_id)
        if entry is None:
            raise NotFound(f"no revocation logged for {certification_id}")
        return entry

    def issuance_count(self) -> int:
        """Successful issue calls so far, re-issues included."""
        return self._store.issuance_count()
