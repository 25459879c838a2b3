"""Demo: walk a certification through its lifecycle using FastAPI TestClient.

Run with:
    python scripts/demo_lifecycle.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from certissuer.core.config import SETTINGS
from certissuer.main import app
from certissuer.services import token_service

VERIFIER = "verifier-1"
SUBJECT = "T1"
TYPE = "basic-teaching"


def _auth(caller: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=caller)}"}


def main() -> None:
    client = TestClient(app)
    admin = _auth(SETTINGS.deployer_id)
    verifier = _auth(VERIFIER)

    # ── Setup: verifier role + requirements ─────────────────────────
    r = client.put(f"/v1/roles/verifiers/{VERIFIER}", headers=admin)
    print(f"1. PUT  verifier           → {r.status_code}")

    r = client.put(
        f"/v1/requirements/{TYPE}",
        json={
            "required_hours": 40,
            "required_activities": ["workshop", "online-course"],
            "validity_days": 365,
        },
        headers=admin,
    )
    print(f"2. PUT  requirements       → {r.status_code}")

    # ── Issue ───────────────────────────────────────────────────────
    r = client.post(
        "/v1/certifications",
        json={
            "subject": SUBJECT,
            "certification_type": TYPE,
            "evidence": ["workshop", "online-course"],
            "metadata": "ok",
        },
        headers=verifier,
    )
    cert_id = r.json()["id"]
    print(f"3. POST issue              → {r.status_code}  id={cert_id}")

    r = client.get(f"/v1/certifications/{cert_id}/verify")
    print(f"4. GET  verify             → {r.status_code}  {r.json()}")

    # ── Expire + renew ──────────────────────────────────────────────
    r = client.post(f"/v1/certifications/{cert_id}/expire", headers=admin)
    print(f"5. POST expire             → {r.status_code}  status={r.json()['status']}")

    r = client.post(
        f"/v1/certifications/{cert_id}/renew",
        json={"evidence": ["advanced-workshop"]},
        headers=verifier,
    )
    body = r.json()
    print(
        f"6. POST renew              → {r.status_code}  "
        f"renewals={body['renewal_count']} evidence={body['evidence']}"
    )

    # ── Revoke ──────────────────────────────────────────────────────
    r = client.post(
        f"/v1/certifications/{cert_id}/revoke",
        json={"reason": "Violation of terms"},
        headers=admin,
    )
    print(f"7. POST revoke             → {r.status_code}")

    r = client.get(f"/v1/certifications/{cert_id}/verify")
    print(f"8. GET  verify (revoked)   → {r.status_code}  {r.json()['error']}")

    r = client.get(f"/v1/certifications/{cert_id}/revocation")
    print(f"9. GET  revocation log     → {r.status_code}  {r.json()}")


if __name__ == "__main__":
    main()
