"""State store: the five keyed maps and two scalars the core owns.

Every service call runs inside ``store.transaction()``.  A raise inside
the block discards all writes made during it; a normal exit makes them
visible.  Nested ``transaction()`` blocks join the outermost one.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Literal, Protocol

from certissuer.models.certification import CertificationRecord, RevocationLogEntry
from certissuer.models.requirement import RequirementRecord

Role = Literal["admin", "verifier"]


class StateStore(Protocol):
    def transaction(self) -> AbstractContextManager[None]: ...

    def get_certification(self, certification_id: str) -> CertificationRecord | None: ...
    def put_certification(self, record: CertificationRecord) -> None: ...

    def get_requirement(self, certification_type: str) -> RequirementRecord | None: ...
    def put_requirement(self, requirement: RequirementRecord) -> None: ...
    def list_requirements(self) -> list[RequirementRecord]: ...

    def is_member(self, role: Role, member_id: str) -> bool: ...
    def add_member(self, role: Role, member_id: str) -> None: ...
    def remove_member(self, role: Role, member_id: str) -> None: ...
    def list_members(self, role: Role) -> list[str]: ...

    def get_revocation(self, certification_id: str) -> RevocationLogEntry | None: ...
    def put_revocation(self, entry: RevocationLogEntry) -> None: ...

    def is_paused(self) -> bool: ...
    def set_paused(self, paused: bool) -> None: ...

    def issuance_count(self) -> int: ...
    def increment_issuance_count(self) -> int: ...


class InMemoryStateStore:
    """Dict-backed store with snapshot/restore transactions.

    Records are frozen dataclasses, so shallow copies of the maps are
    enough to roll back.
    """

    def __init__(self) -> None:
        self._certifications: dict[str, CertificationRecord] = {}
        self._requirements: dict[str, RequirementRecord] = {}
        self._members: dict[str, set[str]] = {"admin": set(), "verifier": set()}
        self._revocations: dict[str, RevocationLogEntry] = {}
        self._paused = False
        self._issuance_count = 0
        self._depth = 0

    def _snapshot(self) -> tuple:
        return (
            dict(self._certifications),
            dict(self._requirements),
            {role: set(ids) for role, ids in self._members.items()},
            dict(self._revocations),
            self._paused,
            self._issuance_count,
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self._certifications,
            self._requirements,
            self._members,
            self._revocations,
            self._paused,
            self._issuance_count,
        ) = snapshot

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            yield
            return

        snapshot = self._snapshot()
        self._depth += 1
        try:
            yield
        except BaseException:
            self._restore(snapshot)
            raise
        finally:
            self._depth -= 1

    def get_certification(self, certification_id: str) -> CertificationRecord | None:
        return self._certifications.get(certification_id)

    def put_certification(self, record: CertificationRecord) -> None:
        self._certifications[record.id] = record

    def get_requirement(self, certification_type: str) -> RequirementRecord | None:
        return self._requirements.get(certification_type)

    def put_requirement(self, requirement: RequirementRecord) -> None:
        self._requirements[requirement.certification_type] = requirement

    def list_requirements(self) -> list[RequirementRecord]:
        return sorted(self._requirements.values(), key=lambda r: r.certification_type)

    def is_member(self, role: Role, member_id: str) -> bool:
        return member_id in self._members[role]

    def add_member(self, role: Role, member_id: str) -> None:
        self._members[role].add(member_id)

    def remove_member(self, role: Role, member_id: str) -> None:
        self._members[role].discard(member_id)

    def list_members(self, role: Role) -> list[str]:
        return sorted(self._members[role])

    def get_revocation(self, certification_id: str) -> RevocationLogEntry | None:
        return self._revocations.get(certification_id)

    def put_revocation(self, entry: RevocationLogEntry) -> None:
        self._revocations[entry.certification_id] = entry

    def is_paused(self) -> bool:
        return self._paused

    def set_paused(self, paused: bool) -> None:
        self._paused = paused

    def issuance_count(self) -> int:
        return self._issuance_count

    def increment_issuance_count(self) -> int:
        self._issuance_count += 1
        return self._issuance_count
