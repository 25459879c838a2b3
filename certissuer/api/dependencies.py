from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from certissuer.models.principal import Principal
from certissuer.services import token_service
from certissuer.services.certification_service import (
    CertificationService,
    build_service,
)

logger = logging.getLogger(__name__)

# Token issuance belongs to the hosting platform; tokenUrl only feeds
# the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# --- Module-level service singleton (in-memory store unless DATABASE_URL) ---
certification_service = build_service()


def get_service() -> CertificationService:
    """FastAPI dependency returning the process-wide service.

    Tests swap it with ``app.dependency_overrides[get_service]``.
    """
    return certification_service


def require_caller(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Role checks are not done here: the lifecycle services decide, per
    operation, whether the caller is an admin or a verifier.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(caller_id=claims["sub"])
    logger.debug("Token validated for caller=%s", principal.caller_id)
    return principal


ServiceDep = Annotated[CertificationService, Depends(get_service)]
CallerDep = Annotated[Principal, Depends(require_caller)]
