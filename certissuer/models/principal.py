from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated bearer token.

    Carries identity only.  Whether the caller is an admin or a
    verifier is answered by the AuthorizationRegistry at call time,
    never by claims inside the token, so removing a verifier takes
    effect on their very next request.
    """

    caller_id: str
