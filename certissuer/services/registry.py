"""Role membership and the global pause flag.

Admins and verifiers are two disjoint sets, not a hierarchy: an admin
is not implicitly a verifier.  Operations that accept either role check
both sets explicitly.
"""

from __future__ import annotations

import logging

from certissuer.core.metrics import SYSTEM_PAUSED
from certissuer.repos.state_store import Role, StateStore
from certissuer.services.errors import Paused, Unauthorized

logger = logging.getLogger(__name__)


class AuthorizationRegistry:
    def __init__(self, store: StateStore, deployer_id: str) -> None:
        self._store = store
        self.deployer_id = deployer_id

    def bootstrap(self) -> None:
        """Seed the deploying identity as the first admin."""
        with self._store.transaction():
            if not self._store.is_member("admin", self.deployer_id):
                self._store.add_member("admin", self.deployer_id)
                logger.info("Bootstrapped deployer admin=%s", self.deployer_id)

    # --- queries ---

    def is_admin(self, member_id: str) -> bool:
        return self._store.is_member("admin", member_id)

    def is_verifier(self, member_id: str) -> bool:
        return self._store.is_member("verifier", member_id)

    def list_admins(self) -> list[str]:
        return self._store.list_members("admin")

    def list_verifiers(self) -> list[str]:
        return self._store.list_members("verifier")

    # --- guards ---

    def require_admin(self, caller: str, operation: str) -> None:
        if not self.is_admin(caller):
            logger.warning(
                "Access denied: caller=%s is not an admin (operation=%s)",
                caller,
                operation,
                extra={"caller_id": caller, "operation": operation},
            )
            raise Unauthorized(f"{operation} requires the admin role")

    def require_issuer(self, caller: str, operation: str) -> None:
        if not (self.is_admin(caller) or self.is_verifier(caller)):
            logger.warning(
                "Access denied: caller=%s is neither admin nor verifier (operation=%s)",
                caller,
                operation,
                extra={"caller_id": caller, "operation": operation},
            )
            raise Unauthorized(f"{operation} requires the admin or verifier role")

    # --- mutations ---

    def _add(self, caller: str, role: Role, member_id: str) -> None:
        with self._store.transaction():
            self.require_admin(caller, f"add_{role}")
            self._store.add_member(role, member_id)
        logger.info("Granted role=%s to member=%s by caller=%s", role, member_id, caller)

    def _remove(self, caller: str, role: Role, member_id: str) -> None:
        with self._store.transaction():
            self.require_admin(caller, f"remove_{role}")
            self._store.remove_member(role, member_id)
        logger.info(
            "Revoked role=%s from member=%s by caller=%s", role, member_id, caller
        )

    def add_admin(self, caller: str, new_admin: str) -> None:
        self._add(caller, "admin", new_admin)

    def remove_admin(self, caller: str, target: str) -> None:
        with self._store.transaction():
            self.require_admin(caller, "remove_admin")
            if target == self.deployer_id:
                logger.warning(
                    "Rejected removal of deployer admin=%s by caller=%s",
                    target,
                    caller,
                )
                raise Unauthorized("the deploying admin cannot be removed")
            self._remove(caller, "admin", target)

    def add_verifier(self, caller: str, new_verifier: str) -> None:
        self._add(caller, "verifier", new_verifier)

    def remove_verifier(self, caller: str, target: str) -> None:
        self._remove(caller, "verifier", target)


class PauseSwitch:
    """Global flag that freezes lifecycle mutations.

    Registry and catalog administration keep working while paused;
    otherwise nobody could ever unpause.
    """

    def __init__(self, store: StateStore, registry: AuthorizationRegistry) -> None:
        self._store = store
        self._registry = registry

    def is_paused(self) -> bool:
        return self._store.is_paused()

    def ensure_not_paused(self, operation: str) -> None:
        if self._store.is_paused():
            logger.warning(
                "Rejected %s: system is paused",
                operation,
                extra={"operation": operation},
            )
            raise Paused(f"{operation} is unavailable while the system is paused")

    def pause(self, caller: str) -> None:
        self._set(caller, True)

    def unpause(self, caller: str) -> None:
        self._set(caller, False)

    def _set(self, caller: str, paused: bool) -> None:
        operation = "pause" if paused else "unpause"
        with self._store.transaction():
            self._registry.require_admin(caller, operation)
            self._store.set_paused(paused)
        SYSTEM_PAUSED.set(1 if paused else 0)
        logger.info("System %sd by caller=%s", operation, caller)
