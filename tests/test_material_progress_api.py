"""Material progress endpoint tests."""
import uuid

import pytest


@pytest.fixture
def material_id():
    return str(uuid.uuid4())


def initialize(client, headers, material_id, total_pages=3):
    return client.post(
        f"/material-progress/{material_id}/initialize",
        json={"totalPages": total_pages},
        headers=headers,
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_requires_token(client, material_id):
    response = client.get(f"/material-progress/{material_id}/progress")
    assert response.status_code in (401, 403)


def test_rejects_bad_token(client, material_id):
    response = client.get(
        f"/material-progress/{material_id}/progress",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_initialize_returns_envelope(client, auth_headers, material_id):
    response = initialize(client, auth_headers, material_id)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["materialId"] == material_id
    assert data["totalPages"] == 3
    assert data["currentPage"] == 1
    assert data["canDownload"] is False
    assert [p["pageNumber"] for p in data["pages"]] == [1, 2, 3]
    assert data["pages"][0]["minTimeRequired"] == 360
    assert data["pages"][0]["maxTimeAllowed"] == 720


def test_initialize_invalid_page_count(client, auth_headers, material_id):
    response = initialize(client, auth_headers, material_id, total_pages=0)
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidPageCountError"


def test_progress_before_initialize(client, auth_headers, material_id):
    response = client.get(f"/material-progress/{material_id}/progress", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


def test_start_locked_page(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    response = client.post(f"/material-progress/{material_id}/pages/2/start", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "SequenceViolationError"


def test_time_checkpoint_is_max_merged(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    client.put(f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": 200}, headers=auth_headers)
    response = client.put(
        f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": 150}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["pages"][0]["timeSpent"] == 200


def test_negative_time_is_unprocessable(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    response = client.put(
        f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": -5}, headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidTimeError"


def test_complete_too_early(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    client.put(f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": 300}, headers=auth_headers)
    response = client.post(f"/material-progress/{material_id}/pages/1/complete", headers=auth_headers)
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "ThresholdNotMetError"
    assert "60 more seconds" in body["detail"]


def test_full_reading_flow(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id, total_pages=2)
    for page in (1, 2):
        assert client.post(
            f"/material-progress/{material_id}/pages/{page}/start", headers=auth_headers
        ).status_code == 200
        client.put(
            f"/material-progress/{material_id}/pages/{page}/time", json={"timeSpent": 365}, headers=auth_headers
        )
        response = client.post(f"/material-progress/{material_id}/pages/{page}/complete", headers=auth_headers)
        assert response.status_code == 200

    data = client.get(f"/material-progress/{material_id}/can-download", headers=auth_headers).json()["data"]
    assert data["canDownload"] is True
    assert data["reason"] == "All pages completed"
    assert data["progress"]["completedPages"] == 2
    assert data["progress"]["totalPages"] == 2
    assert data["progress"]["progressPercentage"] == 100.0


def test_can_download_partial(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    client.put(f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": 400}, headers=auth_headers)
    client.post(f"/material-progress/{material_id}/pages/1/complete", headers=auth_headers)

    data = client.get(f"/material-progress/{material_id}/can-download", headers=auth_headers).json()["data"]
    assert data["canDownload"] is False
    assert data["progress"]["completedPages"] == 1
    assert data["progress"]["currentPage"] == 2


def test_page_progress(client, auth_headers, material_id):
    initialize(client, auth_headers, material_id)
    client.put(f"/material-progress/{material_id}/pages/1/time", json={"timeSpent": 45}, headers=auth_headers)
    response = client.get(f"/material-progress/{material_id}/pages/1/progress", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["timeSpent"] == 45

    response = client.get(f"/material-progress/{material_id}/pages/9/progress", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "OutOfRangeError"


def test_page_count_for_known_material(client, auth_headers, material):
    response = client.get(f"/materials/{material.id}/page-count", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    # 300 KiB estimated at 75 KiB per page
    assert data["pageCount"] == 4
    assert data["fileType"] == "application/pdf"
    assert data["fileSize"] == 300 * 1024


def test_page_count_unknown_material(client, auth_headers):
    response = client.get(f"/materials/{uuid.uuid4()}/page-count", headers=auth_headers)
    assert response.status_code == 404
