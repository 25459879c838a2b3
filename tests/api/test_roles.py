from __future__ import annotations

from fastapi.testclient import TestClient

from certissuer.services.certification_service import CertificationService
from tests.conftest import ADMIN, DEPLOYER, VERIFIER


def test_list_admins_shows_deployer(client: TestClient) -> None:
    resp = client.get("/v1/roles/admins")
    assert resp.status_code == 200
    assert resp.json() == {"role": "admin", "members": [DEPLOYER]}


def test_add_verifier(client: TestClient, deployer_headers: dict[str, str]) -> None:
    resp = client.put(f"/v1/roles/verifiers/{VERIFIER}", headers=deployer_headers)
    assert resp.status_code == 200
    assert resp.json() == {"member_id": VERIFIER, "role": "verifier", "member": True}

    check = client.get(f"/v1/roles/verifiers/{VERIFIER}")
    assert check.json()["member"] is True
    assert client.get("/v1/roles/verifiers").json()["members"] == [VERIFIER]


def test_remove_verifier(
    client: TestClient,
    service: CertificationService,
    deployer_headers: dict[str, str],
) -> None:
    service.add_verifier(DEPLOYER, VERIFIER)

    resp = client.delete(f"/v1/roles/verifiers/{VERIFIER}", headers=deployer_headers)
    assert resp.status_code == 204
    assert client.get(f"/v1/roles/verifiers/{VERIFIER}").json()["member"] is False


def test_add_and_remove_admin(
    client: TestClient, deployer_headers: dict[str, str]
) -> None:
    assert client.put(f"/v1/roles/admins/{ADMIN}", headers=deployer_headers).status_code == 200
    assert client.get(f"/v1/roles/admins/{ADMIN}").json()["member"] is True

    assert client.delete(f"/v1/roles/admins/{ADMIN}", headers=deployer_headers).status_code == 204
    assert client.get(f"/v1/roles/admins/{ADMIN}").json()["member"] is False


def test_outsider_cannot_grant_roles(
    client: TestClient, outsider_headers: dict[str, str]
) -> None:
    resp = client.put(f"/v1/roles/admins/{ADMIN}", headers=outsider_headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Unauthorized"


def test_deployer_cannot_be_removed(
    client: TestClient, deployer_headers: dict[str, str]
) -> None:
    resp = client.delete(f"/v1/roles/admins/{DEPLOYER}", headers=deployer_headers)
    assert resp.status_code == 403
    assert client.get(f"/v1/roles/admins/{DEPLOYER}").json()["member"] is True


def test_mutation_requires_token(client: TestClient) -> None:
    assert client.put(f"/v1/roles/verifiers/{VERIFIER}").status_code == 401
