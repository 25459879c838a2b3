from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]
RenewalEligibility = Literal["stored-status", "clock"]


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    deployer_id: str = "deployer"
    clock_units_per_day: int = 86400
    renewal_eligibility: RenewalEligibility = "stored-status"
    # PEM text or a path to a PEM file; None means dev/test ephemeral keys.
    jwt_public_key: str | None = None
    jwt_issuer: str = "cert-issuer-service"
    jwt_audience: str = "cert-issuer-service"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    units_raw = _getenv("CLOCK_UNITS_PER_DAY", "86400")
    eligibility_raw = _getenv("RENEWAL_ELIGIBILITY", "stored-status").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        units_per_day = int(units_raw)
    except ValueError:
        raise ValueError(
            f"CLOCK_UNITS_PER_DAY must be an integer (got {units_raw!r})"
        ) from None
    if units_per_day <= 0:
        raise ValueError(f"CLOCK_UNITS_PER_DAY must be positive (got {units_per_day})")

    if eligibility_raw not in ("stored-status", "clock"):
        raise ValueError(
            "RENEWAL_ELIGIBILITY must be stored-status|clock "
            f"(got {eligibility_raw!r})"
        )

    deployer_id = _getenv("DEPLOYER_ID", "deployer")
    if not deployer_id:
        raise ValueError("DEPLOYER_ID must be non-empty")

    database_url = _getenv("DATABASE_URL", "") or None

    jwt_public_key = _getenv("JWT_PUBLIC_KEY", "") or None
    if jwt_public_key is None and app_env_raw == "prod":
        raise ValueError("JWT_PUBLIC_KEY is required when APP_ENV=prod")
    jwt_issuer = _getenv("JWT_ISSUER", "cert-issuer-service")
    jwt_audience = _getenv("JWT_AUDIENCE", "cert-issuer-service")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        port=port,
        database_url=database_url,
        deployer_id=deployer_id,
        clock_units_per_day=units_per_day,
        renewal_eligibility=eligibility_raw,
        jwt_public_key=jwt_public_key,
        jwt_issuer=jwt_issuer,
        jwt_audience=jwt_audience,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
