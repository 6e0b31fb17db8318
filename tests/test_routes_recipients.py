"""Recipient route tests."""

from __future__ import annotations

import json

from conftest import RECIPIENT_PAYLOAD
from package_tracker.routes.recipients import router

CONTACT = RECIPIENT_PAYLOAD["RecipientContact"]


def _create_recipient(client, **overrides) -> dict:
    resp = client.post("/recipients", json={**RECIPIENT_PAYLOAD, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_recipients_health_route_exists() -> None:
    paths = {route.path for route in router.routes}
    assert "/recipients/health" in paths


def test_create_and_get(client) -> None:
    created = _create_recipient(client)

    assert created["RecipientContact"] == CONTACT
    assert created["IDProof"] is None

    resp = client.get(f"/recipients/{CONTACT}")
    assert resp.status_code == 200
    assert resp.json()["Id"] == created["Id"]


def test_create_validation_errors(client) -> None:
    resp = client.post(
        "/recipients", json={**RECIPIENT_PAYLOAD, "RecipientContact": 12345}
    )
    assert resp.status_code == 400
    assert resp.json()["field"] == "RecipientContact"

    resp = client.post(
        "/recipients", json={**RECIPIENT_PAYLOAD, "Address": "short"}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == (
        "Address must be at least 10 characters long"
    )


def test_create_duplicate_contact(client) -> None:
    _create_recipient(client)

    resp = client.post("/recipients", json=RECIPIENT_PAYLOAD)

    assert resp.status_code == 400
    assert resp.json()["code"] == "contact_in_use"


def test_get_unknown_returns_404(client) -> None:
    resp = client.get("/recipients/1112223333")

    assert resp.status_code == 404
    assert resp.json()["detail"] == (
        "Recipient not found with the given contact number"
    )


def test_list(client) -> None:
    _create_recipient(client)
    _create_recipient(client, RecipientContact=5559876543)

    resp = client.get("/recipients")

    assert [r["RecipientContact"] for r in resp.json()] == [
        CONTACT,
        5559876543,
    ]


def test_replace_and_patch(client) -> None:
    _create_recipient(client)

    replaced = client.put(
        f"/recipients/{CONTACT}",
        json={
            "RecipientName": "Janet Doe",
            "RecipientEmail": "janet@example.com",
            "Address": "99 Other Avenue, Shelbyville",
        },
    )
    assert replaced.status_code == 200
    assert replaced.json()["RecipientName"] == "Janet Doe"

    patched = client.patch(
        f"/recipients/{CONTACT}", json={"RecipientContact": 5550001111}
    )
    assert patched.status_code == 200
    assert client.get("/recipients/5550001111").status_code == 200
    assert client.get(f"/recipients/{CONTACT}").status_code == 404


def test_patch_to_taken_contact(client) -> None:
    _create_recipient(client)
    _create_recipient(client, RecipientContact=5559876543)

    resp = client.patch(
        f"/recipients/{CONTACT}", json={"RecipientContact": 5559876543}
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "The new contact number is already in use."


def test_delete(client) -> None:
    _create_recipient(client)

    assert client.delete(f"/recipients/{CONTACT}").status_code == 200
    resp = client.delete(f"/recipients/{CONTACT}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Recipient not found."


def test_add_many(client) -> None:
    resp = client.post(
        "/recipients/add-many",
        json={
            "recipients": [
                RECIPIENT_PAYLOAD,
                {**RECIPIENT_PAYLOAD, "RecipientContact": 5559876543},
            ]
        },
    )

    assert resp.status_code == 201
    assert len(resp.json()["data"]) == 2


def test_add_many_requires_array(client) -> None:
    resp = client.post("/recipients/add-many", json={})

    assert resp.status_code == 400
    assert resp.json()["detail"] == (
        "Invalid input. An array of recipients is required."
    )


def test_import(client) -> None:
    content = json.dumps([RECIPIENT_PAYLOAD]).encode()

    resp = client.post(
        "/recipients/import",
        files={"file": ("recipients.json", content, "application/json")},
    )

    assert resp.status_code == 201
    assert resp.json()["data"][0]["RecipientContact"] == CONTACT


def test_delete_many(client) -> None:
    _create_recipient(client)

    resp = client.post(
        "/recipients/delete-many",
        json={"contactNumbers": [CONTACT, 1112223333]},
    )

    assert resp.status_code == 200
    assert resp.json()["deletedCount"] == 1
    assert resp.json()["notFoundNumbers"] == [1112223333]


def test_update_many(client) -> None:
    _create_recipient(client)

    resp = client.post(
        "/recipients/update-many",
        json={
            "updates": [
                {
                    "RecipientContact": CONTACT,
                    "fieldsToUpdate": {"RecipientName": "Jo Doe"},
                },
            ]
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["updatedCount"] == 1
    assert body["updatedRecipients"][0]["RecipientName"] == "Jo Doe"
    assert body["notFoundNumbers"] == []


def test_update_many_malformed(client) -> None:
    resp = client.post(
        "/recipients/update-many",
        json={"updates": [{"RecipientContact": "abc", "fieldsToUpdate": {}}]},
    )

    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_input"


def test_id_proof_accepts_images_only(client) -> None:
    _create_recipient(client)

    pdf = client.post(
        f"/recipients/{CONTACT}/ID_Proof",
        files={"file": ("id.pdf", b"%PDF", "application/pdf")},
    )
    assert pdf.status_code == 400
    assert pdf.json()["detail"] == (
        "Only JPEG, PNG, GIF, and WebP image formats are allowed."
    )

    png = client.post(
        f"/recipients/{CONTACT}/ID_Proof",
        files={"file": ("id.png", b"\x89PNG", "image/png")},
    )
    assert png.status_code == 200
    assert png.json()["IDProof"]["contentType"] == "image/png"

    fetched = client.get(f"/recipients/{CONTACT}/ID_Proof")
    assert fetched.content == b"\x89PNG"
    assert fetched.headers["content-type"] == "image/png"


def test_delete_id_proof_twice(client) -> None:
    _create_recipient(client)

    first = client.delete(f"/recipients/{CONTACT}/delete_ID_Proof")
    second = client.delete(f"/recipients/{CONTACT}/delete_ID_Proof")

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["IDProof"] is None


def test_id_proof_missing_returns_404(client) -> None:
    _create_recipient(client)

    resp = client.get(f"/recipients/{CONTACT}/ID_Proof")

    assert resp.status_code == 404
    assert resp.json()["code"] == "id_proof_not_found"
