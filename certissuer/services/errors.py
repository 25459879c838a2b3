"""Flat error taxonomy for the certification lifecycle.

One exception class per failure condition.  Each carries a stable
numeric code so downstream consumers can branch on it without parsing
messages.  Nothing here is retried internally; every raise happens
inside a store transaction, so the caller may retry once the
triggering condition is fixed.
"""

from __future__ import annotations


class CertificationError(Exception):
    code: int = 0
    kind: str = "CertificationError"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.kind)
        self.detail = detail or self.kind


class Unauthorized(CertificationError):
    code = 100
    kind = "Unauthorized"


class Paused(CertificationError):
    code = 101
    kind = "Paused"


class InvalidTeacher(CertificationError):
    code = 102
    kind = "InvalidTeacher"


class InvalidType(CertificationError):
    code = 103
    kind = "InvalidType"


class RequirementsNotMet(CertificationError):
    code = 104
    kind = "RequirementsNotMet"


class AlreadyCertified(CertificationError):
    code = 105
    kind = "AlreadyCertified"


class MetadataTooLong(CertificationError):
    code = 106
    kind = "MetadataTooLong"


class NotExpired(CertificationError):
    code = 107
    kind = "NotExpired"


class NotFound(CertificationError):
    code = 108
    kind = "NotFound"


class InvalidPeriod(CertificationError):
    code = 109
    kind = "InvalidPeriod"


class InvalidStatus(CertificationError):
    code = 110
    kind = "InvalidStatus"


class EvidenceLimitExceeded(CertificationError):
    code = 111
    kind = "EvidenceLimitExceeded"


class TooManyActivities(CertificationError):
    code = 112
    kind = "TooManyActivities"


class ReasonTooLong(CertificationError):
    code = 113
    kind = "ReasonTooLong"
