"""Service façade: one store, one clock, every lifecycle component.

The API layer talks only to CertificationService.  Each public call is
serialised by a lock (the web server runs sync endpoints on a thread
pool), wrapped in one store transaction, and counted in
certification_operations_total.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

from certissuer.core.config import SETTINGS, Settings
from certissuer.core.metrics import (
    CERTIFICATION_OPERATIONS,
    SYSTEM_PAUSED,
    VERIFICATION_RESULTS,
)
from certissuer.models.certification import (
    CertificationRecord,
    RevocationLogEntry,
    derive_certification_id,
)
from certissuer.models.requirement import RequirementRecord
from certissuer.repos.state_store import InMemoryStateStore, StateStore
from certissuer.services.certification_ledger import CertificationLedger
from certissuer.services.clock import Clock, SystemClock
from certissuer.services.errors import CertificationError, InvalidStatus, NotFound
from certissuer.services.prerequisite_validator import PrerequisiteValidator
from certissuer.services.registry import AuthorizationRegistry, PauseSwitch
from certissuer.services.requirement_catalog import RequirementCatalog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CertificationService:
    def __init__(
        self,
        store: StateStore,
        clock: Clock,
        settings: Settings = SETTINGS,
        *,
        issuance_validator: PrerequisiteValidator | None = None,
        renewal_validator: PrerequisiteValidator | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.registry = AuthorizationRegistry(store, settings.deployer_id)
        self.pause_switch = PauseSwitch(store, self.registry)
        self.catalog = RequirementCatalog(store, self.registry)
        self.ledger = CertificationLedger(
            store,
            self.registry,
            self.pause_switch,
            self.catalog,
            clock,
            units_per_day=settings.clock_units_per_day,
            renewal_eligibility=settings.renewal_eligibility,
            issuance_validator=issuance_validator,
            renewal_validator=renewal_validator,
        )
        self._lock = threading.RLock()
        self.registry.bootstrap()
        SYSTEM_PAUSED.set(1 if store.is_paused() else 0)

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            try:
                with self.store.transaction():
                    yield
            except CertificationError as e:
                CERTIFICATION_OPERATIONS.labels(operation=name, result=e.kind).inc()
                raise
            CERTIFICATION_OPERATIONS.labels(operation=name, result="ok").inc()

    def _read(self, fn: Callable[[], T]) -> T:
        # A short transaction so the SQL session never idles inside one.
        with self._lock, self.store.transaction():
            return fn()

    # --- AuthorizationRegistry ---

    def add_admin(self, caller: str, new_admin: str) -> None:
        with self._operation("add_admin"):
            self.registry.add_admin(caller, new_admin)

    def remove_admin(self, caller: str, target: str) -> None:
        with self._operation("remove_admin"):
            self.registry.remove_admin(caller, target)

    def add_verifier(self, caller: str, new_verifier: str) -> None:
        with self._operation("add_verifier"):
            self.registry.add_verifier(caller, new_verifier)

    def remove_verifier(self, caller: str, target: str) -> None:
        with self._operation("remove_verifier"):
            self.registry.remove_verifier(caller, target)

    def is_admin(self, member_id: str) -> bool:
        return self._read(lambda: self.registry.is_admin(member_id))

    def is_verifier(self, member_id: str) -> bool:
        return self._read(lambda: self.registry.is_verifier(member_id))

    def list_admins(self) -> list[str]:
        return self._read(self.registry.list_admins)

    def list_verifiers(self) -> list[str]:
        return self._read(self.registry.list_verifiers)

    # --- PauseSwitch ---

    def pause(self, caller: str) -> None:
        with self._operation("pause"):
            self.pause_switch.pause(caller)

    def unpause(self, caller: str) -> None:
        with self._operation("unpause"):
            self.pause_switch.unpause(caller)

    def is_paused(self) -> bool:
        return self._read(self.pause_switch.is_paused)

    # --- RequirementCatalog ---

    def set_requirements(
        self,
        caller: str,
        certification_type: str,
        required_hours: int,
        required_activities: Sequence[str],
        validity_days: int,
    ) -> RequirementRecord:
        with self._operation("set_requirements"):
            return self.catalog.set_requirements(
                caller,
                certification_type,
                required_hours,
                required_activities,
                validity_days,
            )

    def get_requirements(self, certification_type: str) -> RequirementRecord:
        return self._read(lambda: self.catalog.get_requirements(certification_type))

    def list_requirements(self) -> list[RequirementRecord]:
        return self._read(self.catalog.list_requirements)

    # --- CertificationLedger ---

    def issue(
        self,
        caller: str,
        subject: str,
        certification_type: str,
        evidence: Sequence[str],
        metadata: str = "",
    ) -> str:
        with self._operation("issue"):
            return self.ledger.issue(
                caller, subject, certification_type, evidence, metadata
            )

    def renew(
        self, caller: str, certification_id: str, additional_evidence: Sequence[str]
    ) -> CertificationRecord:
        with self._operation("renew"):
            return self.ledger.renew(caller, certification_id, additional_evidence)

    def revoke(
        self, caller: str, certification_id: str, reason: str
    ) -> RevocationLogEntry:
        with self._operation("revoke"):
            return self.ledger.revoke(caller, certification_id, reason)

    def expire(self, caller: str, certification_id: str) -> CertificationRecord:
        with self._operation("expire"):
            return self.ledger.expire(caller, certification_id)

    def verify(self, certification_id: str) -> CertificationRecord:
        with self._lock, self.store.transaction():
            try:
                record = self.ledger.verify(certification_id)
            except NotFound:
                VERIFICATION_RESULTS.labels(result="not_found").inc()
                raise
            except InvalidStatus:
                VERIFICATION_RESULTS.labels(result="invalid").inc()
                raise
            VERIFICATION_RESULTS.labels(result="valid").inc()
            return record

    def get_certification(self, certification_id: str) -> CertificationRecord:
        return self._read(lambda: self.ledger.get_certification(certification_id))

    def get_revocation_log(self, certification_id: str) -> RevocationLogEntry:
        return self._read(lambda: self.ledger.get_revocation_log(certification_id))

    def issuance_count(self) -> int:
        return self._read(self.ledger.issuance_count)

    @staticmethod
    def certification_id(subject: str, certification_type: str) -> str:
        return derive_certification_id(subject, certification_type)


def build_service(settings: Settings = SETTINGS) -> CertificationService:
    """Wire the service from settings: SQL store when DATABASE_URL is set."""
    from certissuer.db.engine import session_factory

    if session_factory is not None:
        from certissuer.repos.sql_state_store import SqlStateStore

        store: StateStore = SqlStateStore(session_factory())
        logger.info("Using SQL state store")
    else:
        store = InMemoryStateStore()
        logger.info("Using in-memory state store")

    return CertificationService(store, SystemClock(), settings)
