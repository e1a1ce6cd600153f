"""HTTP API tests against the mock backend."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from logic.image_codec import encode, to_data_url
from server.api import create_app
from stylist_app.app import StylistApp
from stylist_app.config import AppConfig
from tools.mock_backend import MockGenAIClient

FACE = to_data_url(encode(b"face-pixels", "image/jpeg"))
SHIRT = to_data_url(encode(b"shirt-pixels", "image/png"))
JEANS = to_data_url(encode(b"jeans-pixels", "image/png"))


@pytest.fixture()
def client(tmp_path: Path) -> TestClient:
    config = AppConfig(
        use_mock_data=True,
        closet_db_path=str(tmp_path / "closet.db"),
        generation_log_dir=str(tmp_path / "logs"),
    )
    stylist = StylistApp(config=config, client=MockGenAIClient(seed=1))
    return TestClient(create_app(stylist))


def _start(client: TestClient) -> None:
    response = client.post("/users/u1/session", json={"display_name": "Sam"})
    assert response.status_code == 200


def test_healthcheck_reports_mock_mode(client: TestClient) -> None:
    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["mock"] is True


def test_closet_flow_and_outfit(client: TestClient) -> None:
    _start(client)
    assert client.put("/users/u1/face", json={"image": FACE}).json()["persistence"]["ok"] is True

    added = client.post("/users/u1/closet", json={"images": [SHIRT, JEANS], "tags": "blue, casual"}).json()
    assert [item["tags"] for item in added["items"]] == [["blue", "casual"], ["blue", "casual"]]
    shirt_id = added["items"][0]["id"]

    assert client.post(f"/users/u1/closet/{shirt_id}/selection").json() == {"item_id": shirt_id, "selected": True}
    listing = client.get("/users/u1/closet").json()
    assert listing["selected_ids"] == [shirt_id]
    assert [item["image"] for item in listing["items"]] == [SHIRT, JEANS]

    outfit = client.post("/users/u1/outfits", json={"purpose": "  Picnic  ", "mode": "full"})
    assert outfit.status_code == 200
    body = outfit.json()
    assert body["image"].startswith("data:image/png;base64,")
    assert {item["id"] for item in body["items"]} <= {item["id"] for item in added["items"]}


def test_session_restores_saved_closet(client: TestClient) -> None:
    _start(client)
    client.put("/users/u1/face", json={"image": FACE})
    client.post("/users/u1/closet", json={"images": [SHIRT]})
    assert client.delete("/users/u1/session").json() == {"status": "signed_out"}
    assert client.get("/users/u1/closet").status_code == 404

    restored = client.post("/users/u1/session", json={}).json()

    assert restored["user_image"] == FACE
    assert [item["image"] for item in restored["items"]] == [SHIRT]


def test_outfit_errors_map_to_400(client: TestClient) -> None:
    _start(client)
    client.put("/users/u1/face", json={"image": FACE})
    client.post("/users/u1/closet", json={"images": [SHIRT]})

    response = client.post("/users/u1/outfits", json={})

    assert response.status_code == 400
    assert response.json()["kind"] == "insufficient_items"
    assert response.json()["state"] == "idle"


def test_selective_mode_with_nothing_selected(client: TestClient) -> None:
    _start(client)
    client.put("/users/u1/face", json={"image": FACE})
    client.post("/users/u1/closet", json={"images": [SHIRT, JEANS]})

    response = client.post("/users/u1/outfits", json={"mode": "selective"})

    assert response.status_code == 400
    assert response.json()["kind"] == "insufficient_items"


def test_bad_requests(client: TestClient) -> None:
    _start(client)

    assert client.put("/users/u1/face", json={"image": "not-a-data-url"}).json()["kind"] == "malformed_encoding"
    assert client.post("/users/u1/closet", json={"images": []}).status_code == 422
    assert client.post("/users/u1/outfits", json={"mode": "random"}).status_code == 422
    assert client.delete("/users/u1/closet/missing").status_code == 404
    assert client.get("/users/nobody/closet").status_code == 404


def test_invalid_base64_upload_is_rejected_before_saving(client: TestClient) -> None:
    _start(client)
    client.put("/users/u1/face", json={"image": FACE})
    broken = "data:image/png;base64,@@not base64@@"

    upload = client.post("/users/u1/closet", json={"images": [SHIRT, JEANS, broken]})
    face = client.put("/users/u1/face", json={"image": broken})

    assert upload.status_code == 400
    assert upload.json()["kind"] == "malformed_encoding"
    assert face.status_code == 400
    assert client.get("/users/u1/closet").json()["items"] == []

    client.post("/users/u1/closet", json={"images": [SHIRT, JEANS]})
    assert client.post("/users/u1/outfits", json={}).status_code == 200
