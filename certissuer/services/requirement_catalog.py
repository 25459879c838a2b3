from __future__ import annotations

import logging
from collections.abc import Sequence

from certissuer.models.certification import MAX_TYPE_LEN
from certissuer.models.requirement import MAX_ACTIVITIES, RequirementRecord
from certissuer.repos.state_store import StateStore
from certissuer.services.errors import (
    InvalidPeriod,
    InvalidType,
    NotFound,
    TooManyActivities,
)
from certissuer.services.registry import AuthorizationRegistry

logger = logging.getLogger(__name__)


def validate_certification_type(certification_type: str) -> None:
    if not certification_type:
        raise InvalidType("certification type must be non-empty")
    if len(certification_type) > MAX_TYPE_LEN:
        raise InvalidType(
            f"certification type must be at most {MAX_TYPE_LEN} characters"
        )


class RequirementCatalog:
    """Per-type requirements.  Writes replace; they never merge."""

    def __init__(self, store: StateStore, registry: AuthorizationRegistry) -> None:
        self._store = store
        self._registry = registry

    def set_requirements(
        self,
        caller: str,
        certification_type: str,
        required_hours: int,
        required_activities: Sequence[str],
        validity_days: int,
    ) -> RequirementRecord:
        with self._store.transaction():
            self._registry.require_admin(caller, "set_requirements")
            validate_certification_type(certification_type)
            if validity_days <= 0:
                logger.warning(
                    "Rejected requirements for type=%s: validity_days=%d",
                    certification_type,
                    validity_days,
                )
                raise InvalidPeriod("validity period must be greater than zero days")
            if len(required_activities) > MAX_ACTIVITIES:
                raise TooManyActivities(
                    f"at most {MAX_ACTIVITIES} required activities are allowed"
                )

            requirement = RequirementRecord(
                certification_type=certification_type,
                required_hours=required_hours,
                required_activities=tuple(required_activities),
                validity_days=validity_days,
            )
            self._store.put_requirement(requirement)

        logger.info(
            "Requirements set type=%s hours=%d activities=%d validity_days=%d by caller=%s",
            certification_type,
            required_hours,
            len(requirement.required_activities),
            validity_days,
            caller,
        )
        return requirement

    def find(self, certification_type: str) -> RequirementRecord | None:
        return self._store.get_requirement(certification_type)

    def get_requirements(self, certification_type: str) -> RequirementRecord:
        requirement = self._store.get_requirement(certification_type)
        if requirement is None:
            raise NotFound(f"no requirements configured for type {certification_type!r}")
        return requirement

    def list_requirements(self) -> list[RequirementRecord]:
        return self._store.list_requirements()
