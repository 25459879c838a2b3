from __future__ import annotations

from fastapi.testclient import TestClient

from certissuer.models.certification import derive_certification_id
from certissuer.services.certification_service import CertificationService
from certissuer.services.clock import ManualClock
from tests.conftest import (
    BASIC,
    BASIC_ACTIVITIES,
    DEPLOYER,
    START_HEIGHT,
    TEACHER_1,
    UNITS_PER_DAY,
    VERIFIER,
)

ISSUE_BODY = {
    "subject": TEACHER_1,
    "certification_type": BASIC,
    "evidence": BASIC_ACTIVITIES,
    "metadata": "ok",
}


def _setup(service: CertificationService) -> None:
    service.add_verifier(DEPLOYER, VERIFIER)
    service.set_requirements(DEPLOYER, BASIC, 40, BASIC_ACTIVITIES, 365)


def _issue(client: TestClient, headers: dict[str, str]) -> str:
    resp = client.post("/v1/certifications", json=ISSUE_BODY, headers=headers)
    assert resp.status_code == 201
    return resp.json()["id"]


# ---- issue ----


def test_issue_returns_201_and_id(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    resp = client.post("/v1/certifications", json=ISSUE_BODY, headers=verifier_headers)

    assert resp.status_code == 201
    assert resp.json() == {"id": derive_certification_id(TEACHER_1, BASIC)}


def test_issue_requires_token(client: TestClient, service: CertificationService) -> None:
    _setup(service)
    resp = client.post("/v1/certifications", json=ISSUE_BODY)
    assert resp.status_code == 401


def test_issue_rejects_garbage_token(
    client: TestClient, service: CertificationService
) -> None:
    _setup(service)
    resp = client.post(
        "/v1/certifications",
        json=ISSUE_BODY,
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_issue_by_outsider_is_403(
    client: TestClient,
    service: CertificationService,
    outsider_headers: dict[str, str],
) -> None:
    _setup(service)
    resp = client.post("/v1/certifications", json=ISSUE_BODY, headers=outsider_headers)

    assert resp.status_code == 403
    assert resp.json()["error"] == "Unauthorized"
    assert resp.json()["code"] == 100


def test_issue_twice_is_409(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    _issue(client, verifier_headers)
    resp = client.post("/v1/certifications", json=ISSUE_BODY, headers=verifier_headers)

    assert resp.status_code == 409
    assert resp.json()["error"] == "AlreadyCertified"


def test_issue_unknown_type_is_404(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    body = {**ISSUE_BODY, "certification_type": "advanced"}
    resp = client.post("/v1/certifications", json=body, headers=verifier_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


def test_issue_insufficient_evidence_is_422(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    body = {**ISSUE_BODY, "evidence": ["workshop"]}
    resp = client.post("/v1/certifications", json=body, headers=verifier_headers)

    assert resp.status_code == 422
    assert resp.json()["error"] == "RequirementsNotMet"
    assert resp.json()["code"] == 104


def test_issue_long_metadata_is_422(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    body = {**ISSUE_BODY, "metadata": "m" * 501}
    resp = client.post("/v1/certifications", json=body, headers=verifier_headers)
    assert resp.status_code == 422
    assert resp.json()["error"] == "MetadataTooLong"


def test_issue_missing_field_is_request_validation_error(
    client: TestClient, verifier_headers: dict[str, str]
) -> None:
    resp = client.post(
        "/v1/certifications", json={"subject": TEACHER_1}, headers=verifier_headers
    )
    assert resp.status_code == 422
    assert "error" not in resp.json()


# ---- reads ----


def test_get_certification(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)

    resp = client.get(f"/v1/certifications/{cert_id}")

    assert resp.status_code == 200
    assert resp.json() == {
        "id": cert_id,
        "subject": TEACHER_1,
        "certification_type": BASIC,
        "issue_date": START_HEIGHT,
        "expiration_date": START_HEIGHT + 365 * UNITS_PER_DAY,
        "status": "active",
        "evidence": BASIC_ACTIVITIES,
        "metadata": "ok",
        "renewal_count": 0,
    }


def test_get_unknown_certification(client: TestClient) -> None:
    resp = client.get("/v1/certifications/cert_missing")
    assert resp.status_code == 404
    assert resp.json()["code"] == 108


def test_derive_id_endpoint(client: TestClient) -> None:
    resp = client.get(
        "/v1/certifications/id",
        params={"subject": TEACHER_1, "certification_type": BASIC},
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == derive_certification_id(TEACHER_1, BASIC)


# ---- verify ----


def test_verify_is_public(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)

    resp = client.get(f"/v1/certifications/{cert_id}/verify")

    assert resp.status_code == 200
    assert resp.json() == {
        "id": cert_id,
        "valid": True,
        "status": "active",
        "expiration_date": START_HEIGHT + 365 * UNITS_PER_DAY,
    }


def test_verify_past_expiration_is_409(
    client: TestClient,
    service: CertificationService,
    clock: ManualClock,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)
    clock.advance(365 * UNITS_PER_DAY)

    resp = client.get(f"/v1/certifications/{cert_id}/verify")

    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidStatus"


def test_verify_unknown_is_404(client: TestClient) -> None:
    assert client.get("/v1/certifications/cert_missing/verify").status_code == 404


# ---- expire / renew ----


def test_expire_then_renew(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)

    resp = client.post(f"/v1/certifications/{cert_id}/expire", headers=verifier_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "expired"

    resp = client.post(
        f"/v1/certifications/{cert_id}/renew",
        json={"evidence": ["advanced-workshop"]},
        headers=verifier_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "active"
    assert body["renewal_count"] == 1
    assert body["evidence"] == ["workshop", "online-course", "advanced-workshop"]


def test_renew_active_is_409(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)

    resp = client.post(
        f"/v1/certifications/{cert_id}/renew",
        json={"evidence": ["advanced"]},
        headers=verifier_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "NotExpired"


def test_expire_twice_is_409(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)
    client.post(f"/v1/certifications/{cert_id}/expire", headers=verifier_headers)

    resp = client.post(f"/v1/certifications/{cert_id}/expire", headers=verifier_headers)
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidStatus"


# ---- revoke ----


def test_revoke_and_read_log(
    client: TestClient,
    service: CertificationService,
    clock: ManualClock,
    deployer_headers: dict[str, str],
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)
    clock.advance(7)

    resp = client.post(
        f"/v1/certifications/{cert_id}/revoke",
        json={"reason": "Violation of terms"},
        headers=deployer_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "certification_id": cert_id,
        "reason": "Violation of terms",
        "timestamp": START_HEIGHT + 7,
    }

    assert client.get(f"/v1/certifications/{cert_id}").json()["status"] == "revoked"
    log = client.get(f"/v1/certifications/{cert_id}/revocation")
    assert log.status_code == 200
    assert log.json()["reason"] == "Violation of terms"

    verify = client.get(f"/v1/certifications/{cert_id}/verify")
    assert verify.status_code == 409


def test_verifier_cannot_revoke(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)

    resp = client.post(
        f"/v1/certifications/{cert_id}/revoke",
        json={"reason": "no"},
        headers=verifier_headers,
    )
    assert resp.status_code == 403


def test_revocation_log_missing_is_404(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    cert_id = _issue(client, verifier_headers)
    assert client.get(f"/v1/certifications/{cert_id}/revocation").status_code == 404


def test_paused_issue_is_423(
    client: TestClient,
    service: CertificationService,
    verifier_headers: dict[str, str],
) -> None:
    _setup(service)
    service.pause(DEPLOYER)

    resp = client.post("/v1/certifications", json=ISSUE_BODY, headers=verifier_headers)
    assert resp.status_code == 423
    assert resp.json() == {
        "detail": "issue is unavailable while the system is paused",
        "error": "Paused",
        "code": 101,
    }
