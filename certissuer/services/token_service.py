"""Caller identity tokens (ES256 JWT).

A token proves *who* is calling and nothing else.  The ``sub`` claim
is the caller id the lifecycle services check against the admin and
verifier sets; roles are never read from the token.

Tokens are minted by the hosting platform's identity provider.  This
service only verifies them, against the EC public key configured in
JWT_PUBLIC_KEY (PEM text, or a path to a PEM file).  When no key is
configured (dev/test), an ephemeral key pair is generated on import and
``create_access_token`` signs with it so local tools and tests can call
the API.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from certissuer.core.config import SETTINGS

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
ISSUER = SETTINGS.jwt_issuer
AUDIENCE = SETTINGS.jwt_audience
ACCESS_TOKEN_TTL_MIN = 15

_PEM_HEADER = "-----BEGIN"


def load_public_key(value: str) -> ec.EllipticCurvePublicKey:
    """Parse an EC public key from PEM text or from a PEM file path.

    Env vars often carry PEM with literal ``\\n`` escapes; those are
    expanded before parsing.
    """
    if value.lstrip().startswith(_PEM_HEADER):
        pem = value.replace("\\n", "\n").encode("ascii")
    else:
        pem = Path(value).read_bytes()

    key = serialization.load_pem_public_key(pem)
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise ValueError("JWT_PUBLIC_KEY must be an EC (P-256) public key")
    return key


# ---------------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------------
# Dev/test signing key.  Only create_access_token uses it.
_private_key = ec.generate_private_key(ec.SECP256R1())

if SETTINGS.jwt_public_key:
    _verifying_key = load_public_key(SETTINGS.jwt_public_key)
    logger.info("Verifying caller tokens with the configured JWT_PUBLIC_KEY")
else:
    _verifying_key = _private_key.public_key()
    logger.info("No JWT_PUBLIC_KEY configured, verifying with an ephemeral key")


def create_access_token(*, sub: str, ttl_minutes: int = ACCESS_TOKEN_TTL_MIN) -> str:
    """Build and sign a dev/test caller token: sub, iss, aud, exp, iat, jti."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins algorithm to ES256 to prevent alg:none and alg-switching attacks.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _verifying_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
