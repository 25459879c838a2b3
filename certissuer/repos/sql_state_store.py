"""SQLAlchemy implementation of StateStore."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from certissuer.db.tables import (
    CertificationRow,
    RequirementRow,
    RevocationLogRow,
    RoleMemberRow,
    SystemStateRow,
)
from certissuer.models.certification import (
    CertificationRecord,
    CertificationStatus,
    RevocationLogEntry,
)
from certissuer.models.requirement import RequirementRecord
from certissuer.repos.state_store import Role

_PAUSED = "paused"
_ISSUANCE_COUNT = "issuance_count"


class SqlStateStore:
    """Satisfies the StateStore Protocol using SQLAlchemy.

    The outermost ``transaction()`` commits on success and rolls the
    session back on any exception.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            yield
            return

        self._depth += 1
        try:
            yield
            self._session.commit()
        except BaseException:
            self._session.rollback()
            raise
        finally:
            self._depth -= 1

    # --- certifications ---

    def get_certification(self, certification_id: str) -> CertificationRecord | None:
        row = self._session.get(CertificationRow, certification_id)
        if row is None:
            return None
        return _row_to_certification(row)

    def put_certification(self, record: CertificationRecord) -> None:
        row = self._session.get(CertificationRow, record.id)
        if row is None:
            row = CertificationRow(id=record.id)
            self._session.add(row)
        row.subject = record.subject
        row.certification_type = record.certification_type
        row.issue_date = record.issue_date
        row.expiration_date = record.expiration_date
        row.status = record.status.value
        row.evidence = list(record.evidence)
        row.meta = record.metadata
        row.renewal_count = record.renewal_count
        self._session.flush()

    # --- requirements ---

    def get_requirement(self, certification_type: str) -> RequirementRecord | None:
        row = self._session.get(RequirementRow, certification_type)
        if row is None:
            return None
        return _row_to_requirement(row)

    def put_requirement(self, requirement: RequirementRecord) -> None:
        row = self._session.get(RequirementRow, requirement.certification_type)
        if row is None:
            row = RequirementRow(certification_type=requirement.certification_type)
            self._session.add(row)
        row.required_hours = requirement.required_hours
        row.required_activities = list(requirement.required_activities)
        row.validity_days = requirement.validity_days
        self._session.flush()

    def list_requirements(self) -> list[RequirementRecord]:
        stmt = select(RequirementRow).order_by(RequirementRow.certification_type)
        return [_row_to_requirement(r) for r in self._session.scalars(stmt)]

    # --- role membership ---

    def is_member(self, role: Role, member_id: str) -> bool:
        return self._session.get(RoleMemberRow, (role, member_id)) is not None

    def add_member(self, role: Role, member_id: str) -> None:
        if self.is_member(role, member_id):
            return
        self._session.add(RoleMemberRow(role=role, member_id=member_id))
        self._session.flush()

    def remove_member(self, role: Role, member_id: str) -> None:
        stmt = delete(RoleMemberRow).where(
            RoleMemberRow.role == role, RoleMemberRow.member_id == member_id
        )
        self._session.execute(stmt)

    def list_members(self, role: Role) -> list[str]:
        stmt = (
            select(RoleMemberRow.member_id)
            .where(RoleMemberRow.role == role)
            .order_by(RoleMemberRow.member_id)
        )
        return list(self._session.scalars(stmt))

    # --- revocation log ---

    def get_revocation(self, certification_id: str) -> RevocationLogEntry | None:
        row = self._session.get(RevocationLogRow, certification_id)
        if row is None:
            return None
        return RevocationLogEntry(
            certification_id=row.certification_id,
            reason=row.reason,
            timestamp=row.timestamp,
        )

    def put_revocation(self, entry: RevocationLogEntry) -> None:
        row = self._session.get(RevocationLogRow, entry.certification_id)
        if row is None:
            row = RevocationLogRow(certification_id=entry.certification_id)
            self._session.add(row)
        row.reason = entry.reason
        row.timestamp = entry.timestamp
        self._session.flush()

    # --- scalars ---

    def _scalar(self, name: str) -> int:
        row = self._session.get(SystemStateRow, name)
        return 0 if row is None else row.value

    def _set_scalar(self, name: str, value: int) -> None:
        row = self._session.get(SystemStateRow, name)
        if row is None:
            self._session.add(SystemStateRow(name=name, value=value))
        else:
            row.value = value
        self._session.flush()

    def is_paused(self) -> bool:
        return bool(self._scalar(_PAUSED))

    def set_paused(self, paused: bool) -> None:
        self._set_scalar(_PAUSED, int(paused))

    def issuance_count(self) -> int:
        return self._scalar(_ISSUANCE_COUNT)

    def increment_issuance_count(self) -> int:
        value = self._scalar(_ISSUANCE_COUNT) + 1
        self._set_scalar(_ISSUANCE_COUNT, value)
        return value


def _row_to_certification(row: CertificationRow) -> CertificationRecord:
    return CertificationRecord(
        id=row.id,
        subject=row.subject,
        certification_type=row.certification_type,
        issue_date=row.issue_date,
        expiration_date=row.expiration_date,
        status=CertificationStatus(row.status),
        evidence=tuple(row.evidence) if row.evidence else (),
        metadata=row.meta or "",
        renewal_count=row.renewal_count,
    )


def _row_to_requirement(row: RequirementRow) -> RequirementRecord:
    return RequirementRecord(
        certification_type=row.certification_type,
        required_hours=row.required_hours,
        required_activities=(
            tuple(row.required_activities) if row.required_activities else ()
        ),
        validity_days=row.validity_days,
    )
