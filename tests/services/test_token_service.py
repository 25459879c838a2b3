"""Caller tokens signed by an external identity provider.

Each test builds its own EC key pair, configures the service with the
public half (as JWT_PUBLIC_KEY would) and signs tokens with the
private half, the way the hosting platform does.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient

from certissuer.services import token_service
from tests.conftest import DEPLOYER


def _key_pair() -> tuple[ec.EllipticCurvePrivateKey, str]:
    private_key = ec.generate_private_key(ec.SECP256R1())
    pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_key, pem.decode("ascii")


def _external_token(private_key: ec.EllipticCurvePrivateKey, sub: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": token_service.ISSUER,
        "aud": token_service.AUDIENCE,
        "exp": now + timedelta(minutes=5),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, private_key, algorithm="ES256")


@pytest.fixture
def idp_key(monkeypatch: pytest.MonkeyPatch) -> ec.EllipticCurvePrivateKey:
    private_key, pem = _key_pair()
    monkeypatch.setattr(
        token_service, "_verifying_key", token_service.load_public_key(pem)
    )
    return private_key


def test_token_from_configured_key_is_accepted(
    idp_key: ec.EllipticCurvePrivateKey,
) -> None:
    claims = token_service.decode_access_token(_external_token(idp_key, "registrar"))
    assert claims["sub"] == "registrar"


def test_token_from_other_key_is_rejected(
    idp_key: ec.EllipticCurvePrivateKey,
) -> None:
    stranger, _ = _key_pair()
    with pytest.raises(jwt.InvalidSignatureError):
        token_service.decode_access_token(_external_token(stranger, "registrar"))


def test_ephemeral_dev_token_rejected_once_key_is_configured(
    idp_key: ec.EllipticCurvePrivateKey,
) -> None:
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(
            token_service.create_access_token(sub="registrar")
        )


def test_external_token_authorises_api_call(
    client: TestClient, idp_key: ec.EllipticCurvePrivateKey
) -> None:
    headers = {"Authorization": f"Bearer {_external_token(idp_key, DEPLOYER)}"}
    resp = client.post("/v1/system/pause", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["paused"] is True


def test_load_public_key_from_file(tmp_path: Path) -> None:
    private_key, pem = _key_pair()
    path = tmp_path / "jwt_public.pem"
    path.write_text(pem)

    key = token_service.load_public_key(str(path))

    assert key.public_numbers() == private_key.public_key().public_numbers()


def test_load_public_key_expands_escaped_newlines() -> None:
    private_key, pem = _key_pair()
    key = token_service.load_public_key(pem.replace("\n", "\\n"))
    assert key.public_numbers() == private_key.public_key().public_numbers()


def test_load_public_key_rejects_non_ec_key() -> None:
    from cryptography.hazmat.primitives.asymmetric import rsa

    rsa_pem = (
        rsa.generate_private_key(public_exponent=65537, key_size=2048)
        .public_key()
        .public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )
    with pytest.raises(ValueError, match="EC"):
        token_service.load_public_key(rsa_pem)
