"""Prerequisite validation.

The real judge of continuing-education evidence lives outside this
service; the ledger only depends on the PrerequisiteValidator Protocol.
The two implementations here are the coarse necessary-condition checks
the ledger uses by default.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from certissuer.models.requirement import RequirementRecord


@runtime_checkable
class PrerequisiteValidator(Protocol):
    def validate(
        self, evidence: Sequence[str], requirement: RequirementRecord
    ) -> bool:
        """Return True when the evidence satisfies the requirement.  Pure."""
        ...


class IssuanceEvidenceValidator:
    """At least one reference per required activity, and hours configured."""

    def validate(
        self, evidence: Sequence[str], requirement: RequirementRecord
    ) -> bool:
        return (
            len(evidence) >= len(requirement.required_activities)
            and requirement.required_hours > 0
        )


class RenewalEvidenceValidator:
    """Half the strictness of first issuance: ⌊activities / 2⌋ references."""

    def validate(
        self, evidence: Sequence[str], requirement: RequirementRecord
    ) -> bool:
        return len(evidence) >= len(requirement.required_activities) // 2
