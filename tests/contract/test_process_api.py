import os

import pytest
from fastapi.testclient import TestClient

from pixeltune.config import AppConfig
from tests.helpers.media import encode_image, open_image, upload

NEUTRAL = {"brightness": 1, "contrast": 1, "saturation": 1, "rotation": 0}


@pytest.mark.contract
def test_process_returns_three_downloadable_outputs(client: TestClient) -> None:
    identifier = upload(client, encode_image(500, 500, fmt="JPEG"), content_type="image/jpeg")

    response = client.post("/process", json={"filename": identifier, **NEUTRAL})

    assert response.status_code == 200
    body = response.json()
    assert body == {
        "previewFilename": f"{identifier}_preview.jpg",
        "pngFilename": f"{identifier}_processed.png",
        "jpegFilename": f"{identifier}_processed.jpg",
        "processedFilename": f"{identifier}_processed.jpg",
    }
    preview = open_image(client.get(f"/download/{body['previewFilename']}").content)
    full_png = open_image(client.get(f"/download/{body['pngFilename']}").content)
    full_jpeg = open_image(client.get(f"/download/{body['jpegFilename']}").content)
    assert max(preview.size) <= 800
    assert full_png.size == (500, 500)
    assert full_jpeg.size == (500, 500)


@pytest.mark.contract
def test_processed_filename_follows_requested_format(client: TestClient) -> None:
    identifier = upload(client, encode_image(10, 10))

    response = client.post("/process", json={"filename": identifier, **NEUTRAL, "format": "png"})

    assert response.json()["processedFilename"] == f"{identifier}_processed.png"


@pytest.mark.contract
def test_rotation_swaps_output_dimensions(client: TestClient) -> None:
    identifier = upload(client, encode_image(500, 300))

    body = client.post("/process", json={"filename": identifier, **NEUTRAL, "rotation": 90}).json()

    for key in ("pngFilename", "jpegFilename"):
        assert open_image(client.get(f"/download/{body[key]}").content).size == (300, 500)


@pytest.mark.contract
def test_neutral_contrast_leaves_pixels_untouched(client: TestClient) -> None:
    source = encode_image(64, 48)
    identifier = upload(client, source)

    body = client.post("/process", json={"filename": identifier, **NEUTRAL}).json()

    output = open_image(client.get(f"/download/{body['pngFilename']}").content)
    assert output.convert("RGB").tobytes() == open_image(source).convert("RGB").tobytes()


@pytest.mark.contract
def test_validation_errors_list_every_field(client: TestClient, app_config: AppConfig) -> None:
    response = client.post(
        "/process",
        json={"brightness": 5, "contrast": 2.5, "saturation": -1, "rotation": 720},
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"filename", "brightness", "contrast", "saturation", "rotation"}
    assert list(app_config.processed_dir.iterdir()) == []


@pytest.mark.contract
def test_invalid_json_body_returns_400(client: TestClient) -> None:
    response = client.post(
        "/process", content=b"{not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "body"


@pytest.mark.contract
def test_unknown_source_returns_404(client: TestClient) -> None:
    response = client.post("/process", json={"filename": "0" * 32, **NEUTRAL})

    assert response.status_code == 404
    assert response.json() == {"error": "Source image not found"}


@pytest.mark.contract
def test_traversal_in_source_identifier_is_rejected(client: TestClient) -> None:
    response = client.post("/process", json={"filename": "../secrets", **NEUTRAL})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid filename"}


@pytest.mark.contract
def test_corrupt_source_fails_without_partial_outputs(client: TestClient, app_config: AppConfig) -> None:
    identifier = upload(client, b"corrupt bytes")

    response = client.post("/process", json={"filename": identifier, **NEUTRAL})

    assert response.status_code == 500
    assert response.json() == {"error": "Error processing image"}
    assert list(app_config.processed_dir.iterdir()) == []


@pytest.mark.contract
def test_reprocessing_is_idempotent(client: TestClient) -> None:
    identifier = upload(client, encode_image(120, 90))
    params = {"filename": identifier, "brightness": 1.3, "contrast": 0.7, "saturation": 1.8, "rotation": 45}

    first = client.post("/process", json=params).json()
    first_bytes = {key: client.get(f"/download/{name}").content for key, name in first.items()}
    second = client.post("/process", json=params).json()
    second_bytes = {key: client.get(f"/download/{name}").content for key, name in second.items()}

    assert first == second
    assert first_bytes == second_bytes


@pytest.mark.contract
def test_storage_failure_leaves_no_partial_outputs(
    client: TestClient, app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    identifier = upload(client, encode_image(40, 40))
    real_replace = os.replace
    calls = []

    def flaky_replace(src, dst):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError(28, "No space left on device")
        real_replace(src, dst)

    monkeypatch.setattr(os, "replace", flaky_replace)

    response = client.post("/process", json={"filename": identifier, **NEUTRAL})

    assert response.status_code == 500
    assert response.json() == {"error": "Error processing image"}
    assert list(app_config.processed_dir.iterdir()) == []
