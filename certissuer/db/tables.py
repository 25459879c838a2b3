"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in certissuer/models/.
The domain models stay as-is; SqlStateStore converts between rows and
dataclasses.  Portable column types only, so the same tables run on
PostgreSQL in production and SQLite in tests.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    BigInteger,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from certissuer.db.engine import Base


class CertificationRow(Base):
    __tablename__ = "certifications"
    __table_args__ = (
        UniqueConstraint("subject", "certification_type", name="uq_subject_type"),
    )

    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    certification_type: Mapped[str] = mapped_column(String(50), nullable=False)
    issue_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expiration_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="active"
    )  # active|expired|revoked
    evidence: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # "metadata" is reserved on declarative classes.
    meta: Mapped[str] = mapped_column(
        "metadata", String(500), nullable=False, default=""
    )
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class RequirementRow(Base):
    __tablename__ = "certification_requirements"

    certification_type: Mapped[str] = mapped_column(String(50), primary_key=True)
    required_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    required_activities: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    validity_days: Mapped[int] = mapped_column(Integer, nullable=False)


class RoleMemberRow(Base):
    __tablename__ = "role_members"

    role: Mapped[str] = mapped_column(String(16), primary_key=True)  # admin|verifier
    member_id: Mapped[str] = mapped_column(String(255), primary_key=True)


class RevocationLogRow(Base):
    __tablename__ = "revocation_logs"

    certification_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("certifications.id"), primary_key=True
    )
    reason: Mapped[str] = mapped_column(String(200), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)


class SystemStateRow(Base):
    __tablename__ = "system_state"

    name: Mapped[str] = mapped_column(String(32), primary_key=True)  # paused|issuance_count
    value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
